class MissingPathwayColumnError(ValueError):
    """Raised when a pathway result table has no `pathway` column."""


class EnrichmentPlotError(LookupError):
    """
    Base class for conditions that prevent drawing an enrichment curve.

    Panels catch these and render the message instead of a plot.
    """


class PathwaysDataUnavailableError(EnrichmentPlotError):
    """No pathways list or feature statistics registered for a result set."""


class PathwayNotFoundError(EnrichmentPlotError):
    """Pathway identifier missing from the pathways list or result table."""


class DegeneratePathwayError(EnrichmentPlotError):
    """Pathway members cover every ranked feature, so the walk has no misses."""
