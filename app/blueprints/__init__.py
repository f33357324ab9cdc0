"""
Project Status Dashboard
Blueprint registry.

    sheets_bp  — /api/v1/sheets  key/value gateway over the sheet range
    report_bp  — /api/v1/report  report document, derived values, edits
    health_bp  — /api/v1/health  readiness and liveness probes
"""
