from __future__ import annotations

import typer

from ._common import merge_body, read_json_object, record_app, run_create, run_update

COLUMNS = ["id", "name.firstName", "name.lastName", "emails.primaryEmail", "jobTitle", "city"]

app = record_app("people", "person", help="People commands.", columns=COLUMNS)


def _person_fields(
        first_name: str | None,
        last_name: str | None,
        email: str | None,
        phone: str | None,
        job_title: str | None,
        city: str | None,
        company_id: str | None,
) -> dict:
    name = None
    if first_name is not None or last_name is not None:
        name = {"firstName": first_name or "", "lastName": last_name or ""}
    return {
        "name": name,
        "emails": {"primaryEmail": email} if email else None,
        "phones": {"primaryPhoneNumber": phone} if phone else None,
        "jobTitle": job_title,
        "city": city,
        "companyId": company_id,
    }


@app.command("create")
def create_person(
        ctx: typer.Context,
        first_name: str | None = typer.Option(None, "--first-name", help="First name."),
        last_name: str | None = typer.Option(None, "--last-name", help="Last name."),
        email: str | None = typer.Option(None, "--email", help="Primary email."),
        phone: str | None = typer.Option(None, "--phone", help="Primary phone number."),
        job_title: str | None = typer.Option(None, "--job-title", help="Job title."),
        city: str | None = typer.Option(None, "--city", help="City."),
        company_id: str | None = typer.Option(None, "--company-id", help="Company ID."),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON body; flags override its keys."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    body = merge_body(
        read_json_object(data, data_file),
        _person_fields(first_name, last_name, email, phone, job_title, city, company_id),
    )
    run_create(ctx, "people", "person", body, COLUMNS)


@app.command("update")
def update_person(
        ctx: typer.Context,
        person_id: str = typer.Argument(..., help="Person ID."),
        first_name: str | None = typer.Option(None, "--first-name", help="First name."),
        last_name: str | None = typer.Option(None, "--last-name", help="Last name."),
        email: str | None = typer.Option(None, "--email", help="Primary email."),
        phone: str | None = typer.Option(None, "--phone", help="Primary phone number."),
        job_title: str | None = typer.Option(None, "--job-title", help="Job title."),
        city: str | None = typer.Option(None, "--city", help="City."),
        company_id: str | None = typer.Option(None, "--company-id", help="Company ID."),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON body; flags override its keys."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    body = merge_body(
        read_json_object(data, data_file),
        _person_fields(first_name, last_name, email, phone, job_title, city, company_id),
    )
    run_update(ctx, "people", "person", person_id, body, COLUMNS)
