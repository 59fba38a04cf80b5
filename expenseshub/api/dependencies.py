"""Request-scoped access to the application components."""

from fastapi import Request

from expenseshub.orchestrator import (
    AppComponents,
    CategoryFlow,
    ReportFlow,
    SettingsFlow,
    TransactionFlow,
)


async def get_components(request: Request) -> AppComponents:
    components: AppComponents = request.app.state.components
    # No-op once the lifespan has run
    await components.initialize()
    return components


async def get_transaction_flow(request: Request) -> TransactionFlow:
    return (await get_components(request)).transactions


async def get_category_flow(request: Request) -> CategoryFlow:
    return (await get_components(request)).categories


async def get_settings_flow(request: Request) -> SettingsFlow:
    return (await get_components(request)).settings


async def get_report_flow(request: Request) -> ReportFlow:
    return (await get_components(request)).reports
