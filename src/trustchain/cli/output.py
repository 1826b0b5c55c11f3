"""Rich output formatting helpers for the trustchain CLI.

Trust colour mapping: a passing check is bold green, a failing one bold
red; revoked claims are dimmed in claim listings.
"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from trustchain.core.claims.models import (
    AuthenticatedClaim,
    Claim,
    PositiveClaim,
    RevocationClaim,
)
from trustchain.core.trust.models import CheckResult
from trustchain.core.trust.policy import active_claims

console = Console()


def claim_to_json(claim: Claim, signer: str | None = None) -> dict[str, Any]:
    """Convert a claim to a JSON-serializable dict for CLI output."""
    data: dict[str, Any] = {
        "id": claim.id,
        "uid": claim.uid,
        "artifact_id": claim.artifact_id.hex,
        "identifier": claim.identifier,
        "comment": claim.comment,
        "timestamp": claim.timestamp.isoformat(),
    }
    if isinstance(claim, RevocationClaim):
        data["type"] = "revocation"
        data["revoked_id"] = claim.revoked_id
    elif isinstance(claim, PositiveClaim):
        data["type"] = "positive"
        data["claim_kind"] = claim.claim_kind
        data["claim_value"] = claim.claim_value
    if signer is not None:
        data["signer"] = signer
    return data


def check_result_to_json(identifier: str, result: CheckResult) -> dict[str, Any]:
    return {
        "identifier": identifier,
        "artifact_id": result.artifact_id.hex,
        "trust_level": round(result.trust_level.value, 4),
        "threshold": result.threshold.value,
        "passed": result.passed,
    }


def print_claims(claims: list[AuthenticatedClaim]) -> None:
    """Print a table of authenticated claims, dimming revoked ones."""
    if not claims:
        console.print("[dim]No claims found.[/dim]")
        return

    active_ids = {c.id for c in active_claims(claims)}
    table = Table(title="Claims", show_header=True, header_style="bold")
    table.add_column("Id", style="bold")
    table.add_column("Type")
    table.add_column("Kind / Revokes")
    table.add_column("Value")
    table.add_column("Signer", style="dim")
    table.add_column("Timestamp", style="dim")

    for item in claims:
        claim = item.claim
        if isinstance(claim, RevocationClaim):
            row_style = ""
            kind, detail, value = Text("revocation", style="yellow"), claim.revoked_id, "-"
        else:
            row_style = "" if claim.id in active_ids else "dim strike"
            kind = Text("positive", style="green")
            detail = claim.claim_kind
            value = claim.claim_value or "-"
        table.add_row(
            claim.id, kind, detail, value, item.signer.fingerprint,
            claim.timestamp.isoformat(timespec="seconds"), style=row_style,
        )
    console.print(table)


def print_raw_claims(claims: list[Claim]) -> None:
    """Print a table of claims that have not been verified."""
    if not claims:
        console.print("[dim]No claims found.[/dim]")
        return
    table = Table(title="Claims (signatures NOT verified)", show_header=True, header_style="bold")
    table.add_column("Id", style="bold")
    table.add_column("Type")
    table.add_column("Kind / Revokes")
    table.add_column("Uid", style="dim")
    for claim in claims:
        if isinstance(claim, RevocationClaim):
            table.add_row(claim.id, "revocation", claim.revoked_id, claim.uid)
        else:
            table.add_row(claim.id, "positive", claim.claim_kind, claim.uid)
    console.print(table)


def print_check_result(identifier: str, result: CheckResult) -> None:
    """Print the outcome of a trust check."""
    if result.passed:
        verdict = Text("PASSED", style="bold green")
    else:
        verdict = Text("FAILED", style="bold red")
    header = Text.assemble(
        ("Artifact: ", "bold"), (identifier, ""),
        ("  Result: ", "bold"), verdict,
    )
    console.print(Panel(header, title="Trust Check"))
    console.print(f"  Digest:      [dim]{result.artifact_id.hex}[/dim]")
    console.print(f"  Trust Level: [bold]{result.trust_level.value:.3f}[/bold]")
    console.print(f"  Threshold:   {result.threshold.value:.3f}")
