"""Generic create/edit form modal."""

from dataclasses import dataclass, field
from typing import Any, Literal

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Center, Horizontal, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Select, Static, Switch

FieldKind = Literal["text", "password", "number", "date", "select", "bool", "list"]


@dataclass
class FormField:
    """One input of a FormModal."""

    name: str
    label: str
    value: Any = None
    kind: FieldKind = "text"
    options: list[tuple[str, str]] = field(default_factory=list)
    required: bool = False
    empty: Any = None  # value returned for a blank optional input


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if hasattr(value, "value"):
        return str(value.value)
    return str(value)


def parse_field(form_field: FormField, raw: Any) -> Any:
    """
    Convert a widget value into the value handed to the services.

    Blank optional inputs become the field's empty value and list inputs
    are split on commas. Numbers and dates stay text for pydantic to validate.
    """
    if form_field.kind == "bool":
        return bool(raw)
    if form_field.kind == "select":
        # Blank selections are a textual sentinel, not a string
        return raw if isinstance(raw, str) else None
    text = (raw or "").strip()
    if form_field.kind == "list":
        return [part.strip() for part in text.split(",") if part.strip()]
    if not text and not form_field.required:
        return form_field.empty
    return text


class FormModal(ModalScreen[dict[str, Any] | None]):
    """Modal form returning the entered values, or None when cancelled."""

    DEFAULT_CSS = """
    FormModal {
        align: center middle;
    }

    FormModal > VerticalScroll {
        width: 80;
        height: auto;
        max-height: 90%;
        padding: 1 2;
        background: $surface;
        border: solid $primary;
    }

    FormModal .form-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    FormModal .form-row {
        height: auto;
    }

    FormModal .form-label {
        width: 24;
        padding: 1 1 0 0;
    }

    FormModal Input, FormModal Select {
        width: 1fr;
    }

    FormModal #form-error {
        color: $error;
        height: auto;
    }

    FormModal .buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
    }

    FormModal Button {
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("ctrl+s", "save", "Save"),
    ]

    def __init__(self, title: str, fields: list[FormField]) -> None:
        """Initialize the form.

        Args:
            title: Heading shown above the inputs
            fields: Inputs in display order
        """
        super().__init__()
        self.form_title = title
        self.fields = fields

    def compose(self) -> ComposeResult:
        with VerticalScroll():
            yield Static(self.form_title, classes="form-title")
            for form_field in self.fields:
                label = f"{form_field.label}{' *' if form_field.required else ''}"
                with Horizontal(classes="form-row"):
                    yield Label(label, classes="form-label")
                    yield self._widget_for(form_field)
            yield Static("", id="form-error")
            with Center(classes="buttons"):
                yield Button("Save", id="save", variant="primary")
                yield Button("Cancel", id="cancel")

    def _widget_for(self, form_field: FormField):
        widget_id = f"field-{form_field.name}"
        if form_field.kind == "bool":
            return Switch(value=bool(form_field.value), id=widget_id)
        if form_field.kind == "select":
            current = _to_text(form_field.value)
            kwargs: dict[str, Any] = {}
            if current in {value for _, value in form_field.options}:
                kwargs["value"] = current
            return Select(
                form_field.options,
                allow_blank=not form_field.required,
                id=widget_id,
                **kwargs,
            )
        return Input(
            value=_to_text(form_field.value),
            password=form_field.kind == "password",
            placeholder="YYYY-MM-DD" if form_field.kind == "date" else "",
            id=widget_id,
        )

    def collect(self) -> dict[str, Any]:
        """Read and convert the current widget values."""
        values = {}
        for form_field in self.fields:
            widget = self.query_one(f"#field-{form_field.name}")
            values[form_field.name] = parse_field(form_field, widget.value)
        return values

    def missing_required(self, values: dict[str, Any]) -> list[str]:
        return [
            f.label for f in self.fields if f.required and values.get(f.name) in (None, "", [])
        ]

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "save":
            self.action_save()
        else:
            self.action_cancel()

    def action_save(self) -> None:
        values = self.collect()
        missing = self.missing_required(values)
        if missing:
            self.query_one("#form-error", Static).update(f"Required: {', '.join(missing)}")
            return
        self.dismiss(values)

    def action_cancel(self) -> None:
        self.dismiss(None)
