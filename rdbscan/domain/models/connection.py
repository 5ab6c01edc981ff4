from typing import Optional

from pydantic import SecretStr
from sqlalchemy.engine import URL, make_url

from rdbscan.domain.models.base import BaseModel


class ConnectionParams(BaseModel):
    """Connection details handed through to the metadata resolver and the executor.

    The planner never opens a connection itself; `url` is expected to be a
    SQLAlchemy url (JDBC urls are normalised by the configuration layer).
    """

    url: str
    username: Optional[str] = None
    password: Optional[SecretStr] = None

    def to_sqlalchemy_url(self) -> URL:
        url = make_url(self.url)
        if self.username:
            url = url.set(username=self.username)
        if self.password is not None:
            url = url.set(password=self.password.get_secret_value())
        return url

    def __repr__(self):
        return f'<ConnectionParams url="{make_url(self.url).render_as_string(hide_password=True)}">'

    def __str__(self):
        return repr(self)
