"""Scenarios for generating realistic ledger data sets."""

from microledger.scenarios.portfolio import PortfolioScenario

__all__ = ["PortfolioScenario"]
