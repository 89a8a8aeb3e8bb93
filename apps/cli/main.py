"""Typer CLI entrypoint for the barcode payload codec."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import typer

from apps.cli.io import (
    build_output_paths,
    existing_output_files,
    generation_payload,
    write_generation_atomic,
)
from core.format.models import CodecPolicy
from core.format.policy_loader import load_policy
from core.orchestrator.pipeline import generate_payload, scan_payload
from core.templates.models import BarcodeFormat
from core.templates.registry import list_templates
from core.utils.errors import (
    BarcodeFormatError,
    CapacityExceededError,
    FieldValidationError,
    UnknownTemplateError,
)

app = typer.Typer(help="Barcode payload codec CLI", rich_markup_mode=None)


@app.callback()
def cli_callback() -> None:
    """CLI root callback to keep subcommands explicit."""


@app.command("templates")
def templates_command(
    as_json: Annotated[bool, typer.Option("--json", help="Print templates as JSON.")] = False,
) -> None:
    """List registered templates in display order."""

    templates = list_templates()
    if as_json:
        payload = [
            {
                "id": template.id,
                "name": template.name,
                "content_type": template.content_type.value,
                "fields": [
                    {"key": spec.key, "label": spec.label, "required": spec.required}
                    for spec in template.fields
                ],
            }
            for template in templates
        ]
        typer.echo(_dump_json(payload))
        return

    for template in templates:
        required = ", ".join(template.required_keys)
        typer.echo(
            f"{template.id}\t{template.content_type.value}\t{template.name}\trequired: {required}"
        )


@app.command("generate")
def generate_command(
    template: Annotated[str, typer.Option(..., help="Template id, see `templates`.")],
    field: Annotated[
        list[str] | None,
        typer.Option("--field", help="Field value as key=value; repeatable."),
    ] = None,
    values: Annotated[
        Path | None,
        typer.Option(exists=True, dir_okay=False, file_okay=True, help="JSON object of fields."),
    ] = None,
    barcode_format: Annotated[str | None, typer.Option("--format")] = None,
    policy: Annotated[Path | None, typer.Option()] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the full result as JSON.")] = False,
    out_dir: Annotated[
        Path | None,
        typer.Option(help="Also write payload, result and history row files here."),
    ] = None,
    no_overwrite: Annotated[
        bool,
        typer.Option("--no-overwrite", help="Fail when outputs already exist."),
    ] = False,
) -> None:
    """Format field values into the payload text for a barcode."""

    try:
        field_values = _collect_field_values(values, field or [])
        policy_model = load_policy(policy) if policy is not None else CodecPolicy()
    except ValueError as exc:
        typer.echo(f"ERROR: {exc}")
        raise typer.Exit(code=1) from exc

    requested_format = None
    if barcode_format is not None:
        requested_format = BarcodeFormat.from_token(barcode_format)
        if requested_format is BarcodeFormat.UNKNOWN:
            typer.echo(f"ERROR: unsupported barcode format: {barcode_format}")
            raise typer.Exit(code=1)

    try:
        result = generate_payload(
            template,
            field_values,
            policy=policy_model,
            barcode_format=requested_format,
        )
    except UnknownTemplateError as exc:
        typer.echo(f"ERROR: {exc}. Known templates: {', '.join(exc.known)}")
        raise typer.Exit(code=1) from exc
    except FieldValidationError as exc:
        typer.echo(f"ERROR: {exc}")
        if exc.missing_keys:
            typer.echo(f"missing: {', '.join(exc.missing_keys)}")
        if exc.invalid_keys:
            typer.echo(f"invalid: {', '.join(exc.invalid_keys)}")
        raise typer.Exit(code=1) from exc
    except BarcodeFormatError as exc:
        typer.echo(f"ERROR: {exc}. Allowed: {', '.join(exc.allowed)}")
        raise typer.Exit(code=1) from exc
    except CapacityExceededError as exc:
        typer.echo(f"ERROR: {exc}")
        raise typer.Exit(code=1) from exc

    if out_dir is not None:
        paths = build_output_paths(out_dir)
        existing = existing_output_files(paths)
        if existing and no_overwrite:
            typer.echo("ERROR: outputs already exist and --no-overwrite is enabled.")
            raise typer.Exit(code=1)
        if existing:
            names = ", ".join(path.name for path in existing)
            typer.echo(f"INFO: overwriting existing outputs: {names}")
        write_generation_atomic(paths, result)

    if as_json:
        typer.echo(_dump_json(generation_payload(result)))
        return

    typer.echo(result.payload)
    if result.capacity is not None and not result.capacity.within_capacity:
        typer.echo(f"WARN(capacity): {result.capacity.message}", err=True)


@app.command("scan")
def scan_command(
    raw: Annotated[str, typer.Argument(help="Decoded barcode text.")],
    barcode_format: Annotated[str | None, typer.Option("--format")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the result as JSON.")] = False,
) -> None:
    """Classify decoded barcode text and extract its fields."""

    result = scan_payload(raw, BarcodeFormat.from_token(barcode_format))
    classification = result.classification
    if as_json:
        typer.echo(_dump_json(result.model_dump(mode="json")))
        return

    typer.echo(f"type: {classification.content_type.value}")
    for key in sorted(classification.fields):
        typer.echo(f"{key}: {classification.fields[key]}")


def _collect_field_values(values_path: Path | None, pairs: list[str]) -> dict[str, str]:
    field_values: dict[str, str] = {}
    if values_path is not None:
        try:
            raw = json.loads(values_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid values JSON: {values_path}") from exc
        if not isinstance(raw, dict):
            raise ValueError(f"Values file must contain a JSON object: {values_path}")
        field_values.update({str(key): str(value) for key, value in raw.items()})

    for pair in pairs:
        key, separator, value = pair.partition("=")
        if not separator or not key.strip():
            raise ValueError(f"--field must be key=value, got: {pair}")
        field_values[key.strip()] = value
    return field_values


def _dump_json(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, indent=2)


if __name__ == "__main__":
    app()
