"""Check that event names carry the extension's vendor prefix.

Every event declared in the extension's PHP files must start with
``vendor.namespace`` (the composer package name with ``/`` replaced by
``.``) and must not use the vendor prefixes reserved for official code.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from extcheck.config import CheckerConfig
from extcheck.events import EventExtractor, EventRecord, ExtractionResult, collect_events
from extcheck.result import OutputSink
from extcheck.severity import Severity

from . import BaseRule, RuleModule


class EventNamesRule(BaseRule):
    """Validate the names of the events an extension declares."""

    name = "event_names"
    directory = True

    def validate_directory(self, paths: Sequence[str]) -> None:
        extractor = EventExtractor(policy=self.config.partial_events)
        sources = [path for path in paths if path.endswith(self.config.source_extension)]
        results = extractor.crawl(sources, self.basedir)
        self._report_failures(results)

        events = collect_events(results)
        self.output.declare_additional_progress(len(events) * 2)
        self.output.debug_trace(f"Found {len(events)} events in {len(sources)} files")
        for event in events:
            self._check_reserved_prefix(event)
            self._check_vendor_prefix(event)

    def _report_failures(self, results: List[ExtractionResult]) -> None:
        for result in results:
            if result.ok:
                continue
            self.output.declare_additional_progress(1)
            self.output.add_message(Severity.FATAL, str(result.error))

    def _check_reserved_prefix(self, event: EventRecord) -> None:
        if event.matches_prefix(self.config.reserved_vendor):
            self.output.add_message(
                Severity.ERROR,
                f"The {self.config.reserved_vendor} vendorname should only be used for official extensions "
                f"in event names in {event.file}. Current event name: {event.name}",
            )
        elif event.matches_prefix(self.config.reserved_core):
            self.output.add_message(
                Severity.FATAL,
                f"The {self.config.reserved_core} vendorname should not be used in event names "
                f"in {event.file}. Current event name: {event.name}",
            )
        else:
            self.output.record_pass_through()

    def _check_vendor_prefix(self, event: EventRecord) -> None:
        if event.matches_prefix(self.vendor):
            self.output.record_pass_through()
            return
        self.output.add_message(
            Severity.WARNING,
            f"The event name should start with vendor.namespace ({self.vendor}) "
            f"but started with {event.name} in {event.file}",
        )


def get_rule(
    debug: bool,
    output: OutputSink,
    basedir: Path,
    namespace: str = "",
    config: Optional[CheckerConfig] = None,
) -> RuleModule:
    return EventNamesRule(debug, output, basedir, namespace, config)
