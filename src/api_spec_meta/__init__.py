"""Static API metadata: type graphs, Swagger generation and spec diffs."""

__version__ = "0.1.0"
