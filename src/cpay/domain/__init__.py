"""Domain layer for cpay application.

Services are imported from their modules (e.g. ``cpay.domain.transfer``);
this package stays import-light because the database layer depends on
``cpay.domain.entities``.
"""
