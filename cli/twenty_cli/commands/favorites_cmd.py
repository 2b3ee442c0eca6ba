from __future__ import annotations

import typer

from ._common import merge_body, read_json_object, record_app, run_create, run_update

COLUMNS = ["id", "position", "companyId", "personId", "opportunityId", "createdAt"]

app = record_app("favorites", "favorite", help="Favorites commands.", columns=COLUMNS)


def _favorite_fields(
        position: float | None,
        company_id: str | None,
        person_id: str | None,
        opportunity_id: str | None,
) -> dict:
    return {
        "position": position,
        "companyId": company_id,
        "personId": person_id,
        "opportunityId": opportunity_id,
    }


@app.command("create")
def create_favorite(
        ctx: typer.Context,
        position: float | None = typer.Option(None, "--position", help="Sort position."),
        company_id: str | None = typer.Option(None, "--company-id", help="Favorite this company."),
        person_id: str | None = typer.Option(None, "--person-id", help="Favorite this person."),
        opportunity_id: str | None = typer.Option(None, "--opportunity-id", help="Favorite this opportunity."),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON body; flags override its keys."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    body = merge_body(
        read_json_object(data, data_file),
        _favorite_fields(position, company_id, person_id, opportunity_id),
    )
    run_create(ctx, "favorites", "favorite", body, COLUMNS)


@app.command("update")
def update_favorite(
        ctx: typer.Context,
        favorite_id: str = typer.Argument(..., help="Favorite ID."),
        position: float | None = typer.Option(None, "--position", help="Sort position."),
        data: str | None = typer.Option(None, "--data", "-d", help="JSON body; flags override its keys."),
        data_file: str | None = typer.Option(None, "--data-file", "-f", help="JSON file, - for stdin."),
):
    body = merge_body(read_json_object(data, data_file), {"position": position})
    run_update(ctx, "favorites", "favorite", favorite_id, body, COLUMNS)
