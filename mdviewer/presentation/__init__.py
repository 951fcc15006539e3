from .html_renderer import HtmlRenderer
from .presenters import DocumentPresenter, TreePresenter

__all__ = ["HtmlRenderer", "DocumentPresenter", "TreePresenter"]
