"""
Engine error taxonomy.

- MissingMetricsError: one or more pillar snapshots absent for the period.
  Callers prompt for data entry; the engine never defaults the pillar.
- InvalidCompanyProfileError: employee count missing or not positive.
  Recovered inside the score calculator (fallback count + warning).
- ComputationError: a score came out as NaN. Points at a data-shape or logic
  bug rather than incomplete data.
- ValidationError: bad client input (unknown pillar, missing period, bad
  date or status). The only error the blueprints answer with 400.
"""


class ESGEngineError(Exception):
    """Base class for scoring / readiness errors."""


class ValidationError(ESGEngineError, ValueError):
    pass


class CompanyNotFoundError(ESGEngineError):
    def __init__(self, company_id):
        self.company_id = company_id
        super().__init__(f"Company not found: {company_id}")


class MissingMetricsError(ESGEngineError):
    def __init__(self, period, pillars):
        self.period = period
        self.pillars = list(pillars)
        super().__init__(
            f"Missing metrics for period {period}: {', '.join(self.pillars)}. "
            "Please ensure all three metric types (Environmental, Social, and Governance) "
            "are created for the same period."
        )


class InvalidCompanyProfileError(ESGEngineError):
    def __init__(self, company_id, employee_count):
        self.company_id = company_id
        self.employee_count = employee_count
        super().__init__(
            f"Company {company_id} has invalid employee count {employee_count!r}"
        )


class ComputationError(ESGEngineError):
    def __init__(self, scores):
        self.scores = dict(scores)
        detail = ", ".join(f"{k}: {v}" for k, v in self.scores.items())
        super().__init__(
            f"Invalid score calculation result. {detail}. "
            "Please check that all required metric fields are filled with valid numbers."
        )
