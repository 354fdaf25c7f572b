import logging

from pydantic import BaseModel


class AppContext(BaseModel):
    verbose: int = logging.INFO
