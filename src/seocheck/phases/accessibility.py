"""Accessibility & UX Flags phase."""

from seocheck.constants import GENERIC_LINK_TEXTS
from seocheck.models import Document, IssueCategory
from seocheck.phases.base import Phase, PhaseContext, element_text

# Input types that never need a visible label
_UNLABELLED_INPUT_TYPES = {"hidden", "submit", "reset", "button", "image"}


def _has_accessible_name(tag) -> bool:
    if (tag.get("aria-label") or "").strip() or (tag.get("aria-labelledby") or "").strip():
        return True
    if (tag.get("title") or "").strip():
        return True
    if element_text(tag):
        return True
    # An image with alt text inside a link or button names it
    return any((img.get("alt") or "").strip() for img in tag.find_all("img"))


class AccessibilityPhase(Phase):
    """Alt text, accessible names, labels and focus order."""

    id = "accessibility"
    name = "Accessibility & UX Flags"

    async def analyze(self, document: Document, context: PhaseContext) -> None:
        soup = document.soup
        report = context.report

        html = soup.find("html")
        if html is None or not (html.get("lang") or "").strip():
            report(IssueCategory.ACCESSIBILITY, "Missing lang attribute on <html>", document)

        self._check_images(document, context)

        for anchor in soup.find_all("a", href=True):
            if not _has_accessible_name(anchor):
                report(IssueCategory.ACCESSIBILITY, "Link without accessible text", document)
                break

        for anchor in soup.find_all("a", href=True):
            if element_text(anchor).lower().strip(".!… ") in GENERIC_LINK_TEXTS:
                report(IssueCategory.ACCESSIBILITY, "Non-descriptive link text (e.g. \"click here\")", document)
                break

        for button in soup.find_all("button"):
            if not _has_accessible_name(button):
                report(IssueCategory.ACCESSIBILITY, "Button without accessible name", document)
                break

        if self._has_unlabelled_input(soup):
            report(IssueCategory.ACCESSIBILITY, "Form field without label", document)

        for tag in soup.find_all(attrs={"tabindex": True}):
            try:
                if int(tag["tabindex"]) > 0:
                    report(IssueCategory.ACCESSIBILITY, "Positive tabindex disrupts focus order", document)
                    break
            except ValueError:
                continue

    def _check_images(self, document: Document, context: PhaseContext) -> None:
        missing = empty = 0
        for img in document.soup.find_all("img"):
            if not img.has_attr("alt"):
                missing += 1
            elif not img["alt"].strip():
                empty += 1

        if missing:
            context.report(IssueCategory.ACCESSIBILITY, "Image missing alt attribute", document)
        if empty and not context.config.ignore_empty_alt:
            context.report(IssueCategory.ACCESSIBILITY, "Image with empty alt attribute", document)

    @staticmethod
    def _has_unlabelled_input(soup) -> bool:
        labelled_ids = {label["for"] for label in soup.find_all("label", attrs={"for": True})}

        for field in soup.find_all(["input", "select", "textarea"]):
            if field.name == "input" and (field.get("type") or "text").lower() in _UNLABELLED_INPUT_TYPES:
                continue
            if field.get("id") and field["id"] in labelled_ids:
                continue
            if (field.get("aria-label") or "").strip() or (field.get("aria-labelledby") or "").strip():
                continue
            if (field.get("title") or "").strip():
                continue
            if field.find_parent("label") is not None:
                continue
            return True
        return False
