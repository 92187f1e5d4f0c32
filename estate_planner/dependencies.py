"""
FastAPI dependency providers.

The rule catalog is built once by create_app() and stored on app.state; routes
receive it through Depends(get_rule_catalog) so tests can mount an app with an
alternate catalog.
"""
from fastapi import Request

from estate_planner.rules.catalog import RuleCatalog


def get_rule_catalog(request: Request) -> RuleCatalog:
    return request.app.state.rule_catalog
