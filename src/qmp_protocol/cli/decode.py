"""CLI: qmp decode [file]"""

import json

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from qmp_protocol.codec import classify, decode_message, to_wire
from qmp_protocol.errors import DecodeError
from qmp_protocol.models.generic import Command, Event, OobCommand, Response, ServerGreeting

console = Console()


def _summary(message) -> tuple[str, str, str]:
    """(name, id, detail) for one decoded message."""
    if isinstance(message, ServerGreeting):
        version = " ".join(filter(None, [str(message.version.qemu), message.version.package]))
        caps = ", ".join(message.capabilities) or "-"
        return "QMP", "", f"{version} caps: {caps}"
    if isinstance(message, (Command, OobCommand)):
        name = message.execute if isinstance(message, Command) else message.exec_oob
        args = "" if message.arguments is None else json.dumps(to_wire(message).get("arguments"))
        return name, _id_text(message), args
    if isinstance(message, Response):
        if message.is_error:
            return "error", _id_text(message), f"{message.error.class_}: {message.error.description}"
        return "return", _id_text(message), json.dumps(to_wire(message)["return"])
    if isinstance(message, Event):
        when = message.timestamp.to_datetime()
        return message.event, "", when.isoformat() if when else "time unavailable"
    return "", "", ""


def _id_text(message) -> str:
    if "id" not in message.model_fields_set:
        return ""
    return json.dumps(message.id)


@click.command("decode")
@click.argument("source", type=click.File("r"), default="-")
@click.option("--json-output", "--json", is_flag=True)
def decode_cmd(source, json_output):
    """Decode one JSON message per line (stdin by default)."""
    decoded = []
    failures = 0
    for lineno, line in enumerate(source, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            message = decode_message(line)
        except DecodeError as e:
            failures += 1
            if not json_output:
                console.print(f"[red]line {lineno}: {e.code}: {escape(str(e))}[/red]", highlight=False)
            else:
                decoded.append({"line": lineno, "error": e.code, "message": str(e)})
            continue
        decoded.append({"line": lineno, "message": message})

    if json_output:
        out = []
        for entry in decoded:
            if "error" in entry:
                out.append(entry)
                continue
            wire = to_wire(entry["message"])
            out.append({"line": entry["line"], "kind": classify(wire).value, "message": wire})
        click.echo(json.dumps(out, indent=2))
    else:
        table = Table(title=f"Messages ({len(decoded)} decoded, {failures} failed)")
        table.add_column("Line", justify="right")
        table.add_column("Kind", style="bold")
        table.add_column("Name")
        table.add_column("Id")
        table.add_column("Detail")
        for entry in decoded:
            message = entry["message"]
            name, msg_id, detail = _summary(message)
            table.add_row(
                str(entry["line"]), classify(to_wire(message)).value,
                escape(name), escape(msg_id), escape(detail),
            )
        console.print(table)

    if failures:
        raise SystemExit(1)
