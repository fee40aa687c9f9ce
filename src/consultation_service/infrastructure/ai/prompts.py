"""Prompt templates and response schema for case analysis."""

from typing import List

from google.genai import types

from consultation_service.models import Case, Comment

NO_COMMENTS_TEXT = "Engar umsagnir bárust."

CHAT_SYSTEM_INSTRUCTION = (
    "Þú ert Pólitíkus, hjálpsamur og vinalegur spjallþjarkur með sérþekkingu á "
    "íslenskri stjórnsýslu. Svaraðu alltaf á íslensku, hnitmiðað og skýrt."
)

CASE_DETAILS_PROMPT = """
Þú ert sérfræðingur í íslenskri stjórnsýslu og löggjöf. Greindu eftirfarandi mál
úr Samráðsgátt á hlutlausan og ítarlegan hátt.

**Málsupplýsingar:**
Titill: "{name}"
Málsnúmer: "{case_number}"
Ábyrgðaraðili: "{institution}"
Staða: "{status_name}"
Lýsing: "{description}"

**Innsendar umsagnir:**
---
{comments}
---

Skilaðu niðurstöðum eingöngu sem einum JSON hlut samkvæmt skemanu:

1. summary: hnitmiðuð samantekt á megininntaki málsins.
2. keyPoints: helstu atriði, markmið og röksemdir málsins.
3. consultationAnalysis: greining byggð á innsendu umsögnunum hér að ofan (ekki
   lýsingunni), með samantekt (summary), lista yfir umsagnaraðila (reviewers) og
   helstu athugasemdum og tillögum (mainPoints).
4. questionsForMinister: 3-5 málefnalegar og krefjandi spurningar til ábyrgs
   ráðherra ({institution}), byggðar á málinu og umsögnunum.
5. policyAnalysis: samræmi málsins við stjórnarsáttmála, fjármálaáætlun og
   fjárlög; taktu fram ef fjármögnun eða mælikvarða skortir.
6. speechDraft: drög að málefnalegri 10 mínútna ræðu á íslensku sem dregur fram
   það sem vel er gert og bendir á það sem betur mætti fara.
"""

PARLIAMENT_STATUS_PROMPT = """
As an Icelandic political analyst, search only the Icelandic Parliament's website
(althingi.is) for the latest status and related documents of this case: "{title}".

Summarize your findings in Icelandic. If nothing relevant is found on althingi.is,
say so clearly in Icelandic.
"""

PARLIAMENT_REVIEWS_PROMPT = """
Þú ert sérfræðingur í störfum Alþingis. Leitaðu eingöngu á althingi.is að umsögnum
("erindum") sem borist hafa nefnd um málið: "{title}".

1. Finndu málið og nefndina sem hefur það til meðferðar.
2. Finndu umsagnirnar sem borist hafa nefndinni.
3. Fyrir hvern umsagnaraðila: afstaða ("Jákvæð", "Neikvæð" eða "Hlutlaus") og
   stutt samantekt á athugasemdum hans.
4. Gerðu stutta heildarsamantekt.

Skilaðu eingöngu einum JSON hlut, án markdown, með lyklunum 'analysisSummary'
(strengur) og 'reviews' (listi af hlutum með 'reviewer', 'stance' og 'summary').
Ef engar umsagnir finnast, skilaðu tómum 'reviews' lista og viðeigandi samantekt.
"""


def format_comments(comments: List[Comment]) -> str:
    """Render comments as prompt text."""
    if not comments:
        return NO_COMMENTS_TEXT
    return "\n---\n".join(
        f'Umsögn {i} frá "{c.contact}":\n{c.comment}\n' for i, c in enumerate(comments, start=1)
    )


def case_details_prompt(case: Case, comments: List[Comment]) -> str:
    return CASE_DETAILS_PROMPT.format(
        name=case.name,
        case_number=case.case_number,
        institution=case.institution,
        status_name=case.status_name,
        description=case.description,
        comments=format_comments(comments),
    )


def _string_list(description: str) -> types.Schema:
    return types.Schema(
        type=types.Type.ARRAY,
        items=types.Schema(type=types.Type.STRING),
        description=description,
    )


CASE_DETAILS_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "summary": types.Schema(
            type=types.Type.STRING,
            description="Hnitmiðuð samantekt á málinu á íslensku.",
        ),
        "keyPoints": _string_list("Listi yfir helstu atriði og markmið málsins."),
        "questionsForMinister": _string_list("Listi af krefjandi spurningum til ráðherra."),
        "consultationAnalysis": types.Schema(
            type=types.Type.OBJECT,
            properties={
                "summary": types.Schema(
                    type=types.Type.STRING,
                    description="Samantekt á umsögnum úr Samráðsgátt.",
                ),
                "reviewers": _string_list("Listi yfir umsagnaraðila."),
                "mainPoints": _string_list("Helstu athugasemdir og tillögur úr umsögnum."),
            },
            required=["summary", "reviewers", "mainPoints"],
        ),
        "policyAnalysis": types.Schema(
            type=types.Type.STRING,
            description="Greining á málinu í samhengi við stefnu stjórnvalda.",
        ),
        "speechDraft": types.Schema(
            type=types.Type.STRING,
            description="Drög að 10 mínútna ræðu um málið á íslensku.",
        ),
    },
    required=[
        "summary",
        "keyPoints",
        "questionsForMinister",
        "consultationAnalysis",
        "policyAnalysis",
        "speechDraft",
    ],
)
