"""
Outlet trust resolution: source identifier -> trust tier and weight.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional

from stagemeter.schemas import Methodology, OutletConfigEntry, OutletTrust
from stagemeter.utils import extract_domain_from_url, normalize_text

logger = logging.getLogger(__name__)


class OutletTrustResolver:
    """
    Resolves critic sources against the methodology's outlet table.

    Lookup order: outlet id, outlet display name, domain of the review URL.
    Anything else falls back to the default (lowest) tier.
    """

    def __init__(self, methodology: Methodology):
        self.methodology = methodology
        self._by_id: Dict[str, str] = {}
        self._by_name: Dict[str, str] = {}
        self._by_domain: Dict[str, str] = {}

        for outlet_id, entry in methodology.outlets.items():
            self._by_id[outlet_id.strip().upper()] = outlet_id
            if entry.name:
                self._by_name[normalize_text(entry.name).lower()] = outlet_id
            for domain in entry.domains:
                self._by_domain[domain.strip().lower()] = outlet_id

    def tier_weight(self, tier: int) -> float:
        return self.methodology.tier_weights[tier]

    def _lookup(self, source_id: Optional[str], outlet_name: Optional[str], url: Optional[str]) -> Optional[str]:
        if source_id:
            found = self._by_id.get(source_id.strip().upper())
            if found:
                return found
            # Some feeds put the display name in the id slot
            found = self._by_name.get(normalize_text(source_id).lower())
            if found:
                return found

        if outlet_name:
            found = self._by_name.get(normalize_text(outlet_name).lower())
            if found:
                return found

        domain = extract_domain_from_url(url)
        if domain:
            return self._by_domain.get(domain)

        return None

    def resolve(
        self,
        source_id: Optional[str],
        outlet_name: Optional[str] = None,
        url: Optional[str] = None,
    ) -> OutletTrust:
        """
        Resolve one critic source.

        Args:
            source_id: Outlet identifier from the review record
            outlet_name: Display name, used when the id is unknown
            url: Review URL, used when neither id nor name is known

        Returns:
            OutletTrust; unknown sources get the default tier, never an error
        """
        outlet_id = self._lookup(source_id, outlet_name, url)

        if outlet_id is None:
            tier = self.methodology.default_tier
            logger.debug("Unknown outlet %r (%r), defaulting to tier %s", source_id, outlet_name, tier)
            return OutletTrust(
                outlet_id=source_id or "UNKNOWN",
                name=outlet_name or source_id or "Unknown",
                tier=tier,
                weight=self.tier_weight(tier),
                known=False,
            )

        entry: OutletConfigEntry = self.methodology.outlets[outlet_id]
        return OutletTrust(
            outlet_id=outlet_id,
            name=entry.name or outlet_id,
            tier=entry.tier,
            weight=self.tier_weight(entry.tier),
            known=True,
            max_scale=entry.max_scale,
        )
