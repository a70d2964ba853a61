"""
Extractor configuration.

Defaults match the document conventions of the rendering layer: sections
are ``<section>`` elements or anything carrying ``data-section-id``, and
subtrees can opt out with the ``hierarchy-ignore`` class.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class ExtractorConfig:
    """
    Tunables for the hierarchy extractor.

    Attributes:
        section_tag: Element name treated as a section container.
        section_id_attribute: Attribute that marks a section and carries its
            explicit id.
        ignore_class: Class that excludes a subtree from the hierarchy.
        ignore_attribute: Attribute that excludes a subtree from the hierarchy.
        kind_attribute: Attribute whose value ``layout`` tags a layout node.
        initial_delays: One-shot scans scheduled on mount, in seconds.
        debounce_delay: Quiet period after mutations before rescanning.
        heading_label_limit: Max label length for headed sections.
        fallback_label_limit: Max label length for content-derived labels.
        report_section_clicks: Emit ``section-selected`` for clicks inside
            identified sections (editor mode).
    """

    section_tag: str = "section"
    section_id_attribute: str = "data-section-id"
    ignore_class: str = "hierarchy-ignore"
    ignore_attribute: str = "data-hierarchy-ignore"
    kind_attribute: str = "data-hierarchy-kind"
    initial_delays: tuple[float, ...] = (0.5, 1.5)
    debounce_delay: float = 0.2
    heading_label_limit: int = 30
    fallback_label_limit: int = 20
    report_section_clicks: bool = False

    @property
    def candidate_selector(self) -> str:
        """CSS selector matching every section-like element."""
        return f"{self.section_tag}, [{self.section_id_attribute}]"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ExtractorConfig:
        """
        Build a config from ``STRATA_*`` environment variables.

        Recognised variables:
            STRATA_DEBOUNCE_DELAY: float seconds.
            STRATA_INITIAL_DELAYS: comma separated float seconds.
            STRATA_REPORT_SECTION_CLICKS: boolean flag.

        Invalid values are logged and the default is kept.
        """
        env = os.environ if environ is None else environ
        config = cls()

        raw = env.get("STRATA_DEBOUNCE_DELAY")
        if raw is not None:
            try:
                delay = float(raw)
                if delay < 0:
                    raise ValueError("negative delay")
                config.debounce_delay = delay
            except ValueError:
                logger.warning("Ignoring invalid STRATA_DEBOUNCE_DELAY=%r", raw)

        raw = env.get("STRATA_INITIAL_DELAYS")
        if raw is not None:
            try:
                delays = tuple(float(part) for part in raw.split(",") if part.strip())
                if any(d < 0 for d in delays):
                    raise ValueError("negative delay")
                config.initial_delays = delays
            except ValueError:
                logger.warning("Ignoring invalid STRATA_INITIAL_DELAYS=%r", raw)

        raw = env.get("STRATA_REPORT_SECTION_CLICKS")
        if raw is not None:
            value = raw.strip().lower()
            if value in _TRUE_VALUES:
                config.report_section_clicks = True
            elif value in _FALSE_VALUES:
                config.report_section_clicks = False
            else:
                logger.warning("Ignoring invalid STRATA_REPORT_SECTION_CLICKS=%r", raw)

        return config
