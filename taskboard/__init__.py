"""
Taskboard API Client.

Resilient async data-access layer for the taskboard dashboard REST API,
following Clean Architecture and Domain-Driven Design principles.

Structure:
- domain/: Envelopes, errors, project models and validation
- infrastructure/: External concerns (HTTP transport, retries, cache,
  connectivity, config, logging)
- application/: Error classification and the project request facade
- tests/: Test suite (unit)
"""

__version__ = "1.0.0"
