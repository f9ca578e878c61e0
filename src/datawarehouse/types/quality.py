"""Data quality check result types."""

from typing import List

from pydantic import Field

from datawarehouse.constants.medallion import CheckSeverity, CheckStatus
from datawarehouse.types.base import DWBaseModel


class QualityCheckResult(DWBaseModel):
    """Result of a single quality check.

    ``failed_count`` is the number of offending rows (or offending key
    groups for uniqueness checks). A check passes when it is zero.
    """
    check_name: str
    layer: str
    failed_count: int
    severity: CheckSeverity = CheckSeverity.ERROR

    @property
    def status(self) -> CheckStatus:
        return CheckStatus.PASS if self.failed_count == 0 else CheckStatus.FAIL

    @property
    def passed(self) -> bool:
        return self.failed_count == 0


class QualityReport(DWBaseModel):
    """Collection of quality check results for one layer."""
    layer: str
    results: List[QualityCheckResult] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        """False only when an ERROR-severity check failed."""
        return all(
            r.passed for r in self.results if r.severity == CheckSeverity.ERROR.value
        )

    @property
    def failures(self) -> List[QualityCheckResult]:
        return [r for r in self.results if not r.passed]

    def get(self, check_name: str) -> QualityCheckResult:
        for result in self.results:
            if result.check_name == check_name:
                return result
        raise KeyError(check_name)

    def summary(self) -> List[dict]:
        """PASS/FAIL scoreboard rows, failed checks first."""
        rows = [
            {
                "check_name": r.check_name,
                "failed_count": r.failed_count,
                "severity": r.severity,
                "status": r.status.value,
            }
            for r in self.results
        ]
        return sorted(rows, key=lambda row: (row["status"] == "PASS", -row["failed_count"]))
