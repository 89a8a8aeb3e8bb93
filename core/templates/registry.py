"""Template registry: lookup, listing and field validation."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from core.format.payload_formatter import render_keys, supported_content_types
from core.templates.models import ContentType, Template, ValidationReport
from core.templates.specs import TEMPLATES
from core.utils.errors import UnknownTemplateError, UnsupportedContentTypeError

_TEMPLATES_BY_ID: Mapping[str, Template] = MappingProxyType(
    {template.id: template for template in TEMPLATES}
)


def list_templates() -> list[Template]:
    """Return registered templates in stable display order."""

    return list(TEMPLATES)


def list_template_ids() -> list[str]:
    return [template.id for template in TEMPLATES]


def get_template(template_id: str) -> Template:
    """Resolve a template by id."""

    try:
        return _TEMPLATES_BY_ID[template_id]
    except KeyError as exc:
        raise UnknownTemplateError(template_id, known=list_template_ids()) from exc


def templates_for(content_type: ContentType) -> list[Template]:
    return [template for template in TEMPLATES if template.content_type is content_type]


def validate_values(template: Template, values: Mapping[str, str]) -> ValidationReport:
    """Check ``values`` against ``template``'s field specs.

    A field is missing when it is required, absent and has no default, and
    invalid when it is present but rejected by its validator. Empty optional
    values are treated as omitted. Every violation is collected before
    returning.
    """

    report = ValidationReport(template_id=template.id)
    for spec in template.fields:
        value = values.get(spec.key)
        if value is None:
            if spec.required and spec.default is None:
                report.missing_keys.append(spec.key)
            continue
        if not spec.required and not value.strip():
            continue
        if not spec.accepts(value):
            report.invalid_keys.append(spec.key)
    return report


def _assert_registry_alignment() -> None:
    """Fail fast when a template cannot be rendered by the payload formatter."""

    supported = set(supported_content_types())
    seen_ids: set[str] = set()
    for template in TEMPLATES:
        if template.id in seen_ids:
            raise RuntimeError(f"Duplicate template id: {template.id}")
        seen_ids.add(template.id)

        if template.content_type not in supported:
            raise UnsupportedContentTypeError(template.content_type, template_id=template.id)

        if template.default_format not in template.allowed_formats:
            raise RuntimeError(
                f"Template {template.id} default format {template.default_format.value} "
                "is not in its allowed formats"
            )

        keys = set(template.field_keys)
        if len(keys) != len(template.fields):
            raise RuntimeError(f"Template {template.id} declares duplicate field keys")

        expected = render_keys(template.content_type)
        if expected is None:
            if len(template.fields) != 1:
                raise RuntimeError(
                    f"Template {template.id} must declare exactly one field for "
                    f"{template.content_type.value}"
                )
            continue

        required, optional = expected
        if not required <= keys or not keys <= required | optional:
            raise RuntimeError(
                "Template fields must match rendering rule keys: "
                f"template={template.id}, fields={sorted(keys)}, "
                f"required={sorted(required)}, optional={sorted(optional)}"
            )


_assert_registry_alignment()
