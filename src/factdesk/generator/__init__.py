from factdesk.generator.article import DEFAULT_FACT_SCORE, ArticleGenerator

__all__ = ["DEFAULT_FACT_SCORE", "ArticleGenerator"]
