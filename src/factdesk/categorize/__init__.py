from factdesk.categorize.categorizer import Categorizer

__all__ = ["Categorizer"]
