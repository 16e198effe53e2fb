"""Runtime performance monitoring."""

from linkscout.monitoring.regression_detector import PerformanceRegressionDetector

__all__ = ["PerformanceRegressionDetector"]
