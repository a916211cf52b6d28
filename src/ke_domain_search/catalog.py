"""
Extension catalog - the .ke extensions offered by the storefront.

Kenya's second-level zones are administered by KeNIC. Some zones are
restricted to eligible registrants (government, schools, universities)
and require supporting documents at registration.
"""

import asyncio
from dataclasses import replace
from typing import Iterable, Optional

from .models import ExtensionDescriptor

OPEN_ELIGIBILITY = "Open to everyone"
DOCS_REQUIRED = "Requires supporting documents"

# ============================================================================
# OPEN .ke ZONES
# ============================================================================
OPEN_EXTENSIONS = [
    ExtensionDescriptor(ext=".ke", description="Second-level domain for Kenya", popular=True, category="local"),
    ExtensionDescriptor(ext=".co.ke", description="For e-commerce sites and commercial ventures", popular=True, category="commercial"),
    ExtensionDescriptor(ext=".or.ke", description="For NGOs and not-for-profit organizations", category="nonprofit"),
    ExtensionDescriptor(ext=".ne.ke", description="For network-related organizations", category="tech"),
    ExtensionDescriptor(ext=".me.ke", description="For personal websites and blogs", category="personal"),
    ExtensionDescriptor(ext=".mobi.ke", description="For mobile-friendly websites and apps", category="tech"),
    ExtensionDescriptor(ext=".info.ke", description="For informative or educational websites", category="information"),
]

# ============================================================================
# RESTRICTED .ke ZONES
# ============================================================================
RESTRICTED_EXTENSIONS = [
    ExtensionDescriptor(ext=".go.ke", description="For government institutions", category="government", eligibility=DOCS_REQUIRED),
    ExtensionDescriptor(ext=".sc.ke", description="For lower and middle institutes of learning", category="education", eligibility=DOCS_REQUIRED),
    ExtensionDescriptor(ext=".ac.ke", description="For higher education institutions", category="education", eligibility=DOCS_REQUIRED),
]

# ============================================================================
# COMBINE ALL EXTENSIONS
# ============================================================================
DEFAULT_EXTENSIONS = OPEN_EXTENSIONS + RESTRICTED_EXTENSIONS


class ExtensionCatalog:
    """
    Ordered, immutable-by-convention list of extension descriptors.

    Pricing is attached after construction via populate_pricing(); the
    descriptors themselves are frozen, so populating replaces them.
    """

    def __init__(self, extensions: Optional[Iterable[ExtensionDescriptor]] = None) -> None:
        extensions = list(DEFAULT_EXTENSIONS if extensions is None else extensions)
        seen = set()
        self._extensions: list[ExtensionDescriptor] = []
        for descriptor in extensions:
            ext = descriptor.ext.lower()
            if not ext.startswith("."):
                ext = "." + ext
            if ext in seen:
                continue
            seen.add(ext)
            self._extensions.append(replace(descriptor, ext=ext))

    def __len__(self) -> int:
        return len(self._extensions)

    def __iter__(self):
        return iter(self._extensions)

    @property
    def extensions(self) -> list[ExtensionDescriptor]:
        return list(self._extensions)

    def get(self, ext: str) -> Optional[ExtensionDescriptor]:
        ext = ext.lower()
        if not ext.startswith("."):
            ext = "." + ext
        for descriptor in self._extensions:
            if descriptor.ext == ext:
                return descriptor
        return None

    def ordered_for_search(self) -> list[ExtensionDescriptor]:
        """Popular extensions first, then the rest; catalog order within each group."""
        popular = [d for d in self._extensions if d.popular]
        others = [d for d in self._extensions if not d.popular]
        return popular + others

    def longest_match_first(self) -> list[str]:
        """Extension suffixes, longest first, for stripping from user input."""
        return sorted((d.ext for d in self._extensions), key=len, reverse=True)

    def strip_extension(self, text: str) -> str:
        """Remove one trailing known extension (longest match wins)."""
        lowered = text.lower()
        for ext in self.longest_match_first():
            if lowered.endswith(ext) and len(lowered) > len(ext):
                return text[: -len(ext)]
        return text

    async def populate_pricing(self, pricing_fetcher) -> int:
        """
        Attach price tables fetched through a PricingFetcher.

        Extensions whose pricing cannot be fetched keep their previous
        value. Returns the number of extensions that received pricing.
        """
        records = await asyncio.gather(
            *(pricing_fetcher.get_pricing(d.ext) for d in self._extensions)
        )
        populated = 0
        for index, record in enumerate(records):
            if record is not None:
                self._extensions[index] = replace(self._extensions[index], pricing=record)
                populated += 1
        return populated
