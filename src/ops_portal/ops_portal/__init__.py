"""Operations portal package.

Feature modules (attendance, requests, schedules, finance, users) follow the
same layering: frozen dataclass models, Protocol repositories backed by a
key/value record store, service classes holding the business rules, and a thin
Flask controller per feature.
"""
