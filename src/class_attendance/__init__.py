"""Class attendance core.

Feature modules (schedules, overrides, attendance) follow the same layout:
frozen dataclass models, Protocol repositories with MySQL implementations,
service classes holding the rules, and thin Flask controllers.
"""
