from __future__ import annotations

import typer

from ._common import merge_body, read_json_object, record_app, run_create, run_update

COLUMNS = ["id", "name", "stage", "amount.amountMicros", "amount.currencyCode", "closeDate"]

app = record_app("opportunities", "opportunity", help="Opportunities commands.", columns=COLUMNS)


def _amount(amount: float | None, currency: str) -> dict | None:
    if amount is None:
        return None
    return {"amountMicros": str(round(amount * 1_000_000)), "currencyCode": currency.upper()}


def _opportunity_fields(
        name: str | None,
        amount: float | None,
        currency: str,
        close_date: str | None,
        stage: str | None,
        company_id: str | None,
        contact_id: str | None,
) -> dict:
    return {
        "name": name,
        "amount": _amount(amount, currency),
        "closeDate": close_date,
        "stage": stage,
        "companyId": company_id,
        "pointOfContactId": contact_id,
    }


@app.command("create")
def create_opportunity(
        ctx: typer.Context,
        name: str | None = typer.Option(None, "--name", help="Opportunity name."),
        amount: float | None = typer.Option(None, "--amount", help="Amount in currency units."),
        currency: str = typer.Option("USD", "--currency", help="Currency code for --amount."),
        close_date: str | None = typer.Option(None, "--close-date", help="Close date (ISO 8601)."),
        stage: str | None = typer.Option(None, "--stage", help="Pipeline stage."),
        company_id: str | None = typer.Option(None, "--company-id", help="Company ID."),
        contact_id: str | None = typer.Option(None, "--contact-id", help="Point of contact person ID."),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON body; flags override its keys."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    body = merge_body(
        read_json_object(data, data_file),
        _opportunity_fields(name, amount, currency, close_date, stage, company_id, contact_id),
    )
    run_create(ctx, "opportunities", "opportunity", body, COLUMNS)


@app.command("update")
def update_opportunity(
        ctx: typer.Context,
        opportunity_id: str = typer.Argument(..., help="Opportunity ID."),
        name: str | None = typer.Option(None, "--name", help="Opportunity name."),
        amount: float | None = typer.Option(None, "--amount", help="Amount in currency units."),
        currency: str = typer.Option("USD", "--currency", help="Currency code for --amount."),
        close_date: str | None = typer.Option(None, "--close-date", help="Close date (ISO 8601)."),
        stage: str | None = typer.Option(None, "--stage", help="Pipeline stage."),
        company_id: str | None = typer.Option(None, "--company-id", help="Company ID."),
        contact_id: str | None = typer.Option(None, "--contact-id", help="Point of contact person ID."),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON body; flags override its keys."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    body = merge_body(
        read_json_object(data, data_file),
        _opportunity_fields(name, amount, currency, close_date, stage, company_id, contact_id),
    )
    run_update(ctx, "opportunities", "opportunity", opportunity_id, body, COLUMNS)
