"""Shared Jinja2 environment."""

from fastapi.templating import Jinja2Templates

from .config import TEMPLATES_DIR

templates = Jinja2Templates(directory=TEMPLATES_DIR)
