"""Plain-text reporting of revalidation plans."""

from blockcheck.reporting.stdout import PlanReporter

__all__ = ["PlanReporter"]
