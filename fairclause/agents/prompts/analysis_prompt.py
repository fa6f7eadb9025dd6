"""Prompt Templates for document risk analysis.

Quick and full analyses share one response schema; they differ only in the
amount of source text embedded and in how much guidance the prompt gives.
"""

ANALYSIS_SCHEMA = """{
  "documentType": "Identified type of document",
  "riskLevel": "LOW | MEDIUM | HIGH",
  "purpose": "What the document is for, in 2-3 plain sentences",
  "overallScore": number between 0 and 100,
  "keyPoints": ["Key point 1", "Key point 2"],
  "clauses": [
    {
      "id": "clause-1",
      "text": "Full text of the clause or provision",
      "type": "termination | payment | liability | confidentiality | intellectual_property | dispute_resolution | force_majeure | warranties | indemnification | data_protection | compliance | other",
      "riskLevel": "LOW | MEDIUM | HIGH",
      "explanation": "What this clause means and why it matters",
      "legalImplications": "Legal consequences of this clause",
      "suggestions": ["Specific actionable suggestion"],
      "redFlags": ["Concerning aspect of this clause"],
      "obligations": ["Obligation this clause creates"]
    }
  ],
  "legalIssues": ["Specific legal issue or risk factor"],
  "recommendations": ["Recommendation with reasoning"],
  "missingClauses": ["Important clause that is absent and why it matters"]
}"""

ANALYSIS_SCHEMA_DESCRIPTION = (
    "JSON object with documentType (string), riskLevel (LOW|MEDIUM|HIGH), "
    "purpose (string), overallScore (0-100), keyPoints (string[]), "
    "clauses (object[] with id, text, type, riskLevel, explanation, "
    "legalImplications, suggestions[], redFlags[], obligations[]), "
    "legalIssues (string[]), recommendations (string[]), missingClauses (string[])"
)


ANALYSIS_QUICK_PROMPT_TEMPLATE = """Analyze this {document_type} for a {role} in {jurisdiction}. Return ONLY valid JSON, no explanation text.

Document text:
---
{document_text}
---

Required JSON format:
{schema}"""


ANALYSIS_FULL_PROMPT_TEMPLATE = """You are an expert legal analyst. Analyze the following {document_type} from the perspective of a {role} in {jurisdiction}.

Document text:
---
{document_text}
---

INSTRUCTIONS:
1. Break the document down into individual clauses or provisions (aim for 5-15)
2. Analyze each clause for legal risks, obligations and implications for the {role}
3. Give a concrete explanation and actionable suggestions for each clause
4. Identify unusual, one-sided or missing provisions
5. Consider laws and regulations that apply in {jurisdiction}
6. Use ONLY these risk values: LOW, MEDIUM, HIGH

OUTPUT FORMAT (JSON ONLY, NO EXPLANATIONS, NO MARKDOWN):
{schema}"""
