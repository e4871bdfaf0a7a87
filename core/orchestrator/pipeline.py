"""Orchestration pipeline for hydration mismatch detection."""

from __future__ import annotations

from core.diag.differ import diff_lines
from core.diag.grouper import group
from core.diag.models import DiagPolicy, MismatchReport
from core.diag.normalizer import normalize
from core.diag.relevance import RelevancePredicate, filter_records, marker_predicate


def diagnose(
    server_html: str,
    client_html: str,
    policy: DiagPolicy | None = None,
    *,
    predicate: RelevancePredicate | None = None,
    keep_full_text: bool = False,
) -> MismatchReport:
    """Execute normalize -> diff -> group -> filter pipeline.

    The relevance predicate defaults to the policy root markers.
    """

    effective_policy = policy or DiagPolicy()
    relevant = predicate or marker_predicate(effective_policy.root_markers)

    clean_server = normalize(server_html, canonicalize_meta=effective_policy.canonicalize_meta)
    clean_client = normalize(client_html, canonicalize_meta=effective_policy.canonicalize_meta)
    if clean_server == clean_client:
        return MismatchReport()

    chunks = diff_lines(clean_server, clean_client)
    records = group(
        chunks,
        clean_server.splitlines(),
        context_lines=effective_policy.context_lines,
        max_width=effective_policy.max_snippet_width,
        keep_full_text=keep_full_text,
    )
    return MismatchReport(mismatches=tuple(filter_records(records, relevant)))
