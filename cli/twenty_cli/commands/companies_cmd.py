from __future__ import annotations

import typer

from ._common import merge_body, read_json_object, record_app, run_create, run_update

COLUMNS = ["id", "name", "domainName.primaryLinkUrl", "employees", "createdAt"]

app = record_app("companies", "company", help="Companies commands.", columns=COLUMNS)


def _link(url: str | None) -> dict | None:
    return {"primaryLinkUrl": url} if url else None


def _company_fields(
        name: str | None,
        domain: str | None,
        employees: int | None,
        linkedin: str | None,
        x_link: str | None,
        ideal_customer: bool | None,
) -> dict:
    return {
        "name": name,
        "domainName": _link(domain),
        "employees": employees,
        "linkedinLink": _link(linkedin),
        "xLink": _link(x_link),
        "idealCustomerProfile": ideal_customer,
    }


@app.command("create")
def create_company(
        ctx: typer.Context,
        name: str | None = typer.Option(None, "--name", help="Company name."),
        domain: str | None = typer.Option(None, "--domain", help="Domain URL."),
        employees: int | None = typer.Option(None, "--employees", help="Number of employees."),
        linkedin: str | None = typer.Option(None, "--linkedin", help="LinkedIn URL."),
        x_link: str | None = typer.Option(None, "--x-link", help="X (Twitter) URL."),
        ideal_customer: bool | None = typer.Option(None, "--ideal-customer/--not-ideal-customer"),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON body; flags override its keys."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    body = merge_body(
        read_json_object(data, data_file),
        _company_fields(name, domain, employees, linkedin, x_link, ideal_customer),
    )
    run_create(ctx, "companies", "company", body, COLUMNS)


@app.command("update")
def update_company(
        ctx: typer.Context,
        company_id: str = typer.Argument(..., help="Company ID."),
        name: str | None = typer.Option(None, "--name", help="Company name."),
        domain: str | None = typer.Option(None, "--domain", help="Domain URL."),
        employees: int | None = typer.Option(None, "--employees", help="Number of employees."),
        linkedin: str | None = typer.Option(None, "--linkedin", help="LinkedIn URL."),
        x_link: str | None = typer.Option(None, "--x-link", help="X (Twitter) URL."),
        ideal_customer: bool | None = typer.Option(None, "--ideal-customer/--not-ideal-customer"),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON body; flags override its keys."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    body = merge_body(
        read_json_object(data, data_file),
        _company_fields(name, domain, employees, linkedin, x_link, ideal_customer),
    )
    run_update(ctx, "companies", "company", company_id, body, COLUMNS)
