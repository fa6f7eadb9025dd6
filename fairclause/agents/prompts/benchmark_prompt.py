"""Prompt Templates for the Benchmark Comparator.

This module contains the prompt used to compare a contract's terms against
market reference values for its type and jurisdiction.
"""

BENCHMARK_SCHEMA = """{
  "overallFairnessScore": number between 0 and 100,
  "riskLevel": "LOW | MEDIUM | HIGH",
  "summary": "Brief assessment of contract fairness with market context",
  "marketPosition": "above_average | average | below_average | concerning",
  "recommendation": "ACCEPT | NEGOTIATE | AVOID",
  "keyFindings": [
    {
      "clause": "Text of the specific clause",
      "category": "security_deposit | rent_increase | notice_period | payment_terms | termination | liability | penalties | other",
      "riskLevel": "LOW | MEDIUM | HIGH",
      "marketComparison": "How common this term is in similar contracts",
      "percentile": "e.g. 90th percentile",
      "explanation": "Why this clause is fair or unfair",
      "recommendation": "Specific advice for negotiation or acceptance",
      "financialImpact": "Potential cost or benefit, if applicable"
    }
  ],
  "benchmarkMetrics": {
    "metricName": {
      "contractValue": "value in this contract",
      "marketMedian": "typical market value",
      "marketRange": "typical market range",
      "percentile": "e.g. 75th percentile",
      "assessment": "FAVORABLE | STANDARD | UNFAVORABLE",
      "explanation": "Brief comparison explanation"
    }
  },
  "negotiationOpportunities": [
    {
      "clause": "Clause to negotiate",
      "currentTerm": "Current term",
      "suggestedTerm": "Market-standard alternative",
      "justification": "Market data supporting the change",
      "priority": "high | medium | low",
      "likelihood": "high | medium | low"
    }
  ],
  "redFlags": ["Concerning term and why"],
  "positiveAspects": ["Term that is better than market"],
  "marketInsights": ["Relevant market trend"]
}"""

BENCHMARK_SCHEMA_DESCRIPTION = (
    "JSON object with overallFairnessScore (0-100), riskLevel (LOW|MEDIUM|HIGH), "
    "summary (string), marketPosition, recommendation (ACCEPT|NEGOTIATE|AVOID), "
    "keyFindings (object[]), benchmarkMetrics (map of name to {contractValue, "
    "marketMedian, marketRange, percentile, assessment FAVORABLE|STANDARD|UNFAVORABLE}), "
    "negotiationOpportunities (object[]), redFlags, positiveAspects, marketInsights (string[])"
)


BENCHMARK_PROMPT_TEMPLATE = """You are an expert legal analyst specializing in contract fairness and market benchmarking. Analyze this {contract_type} from {jurisdiction} from the perspective of a {role}. Return ONLY valid JSON, no explanation text.

CONTRACT TEXT:
---
{contract_text}
---

PRIOR CLAUSE ANALYSIS:
{clause_digest}

MARKET REFERENCE VALUES ({jurisdiction}):
{market_references}

INSTRUCTIONS:
1. Compare each key term against the market reference values above and typical norms for {jurisdiction}
2. Add a benchmarkMetrics entry per compared term; reuse the reference metric names where they apply
3. Identify terms that are unusually favorable or unfavorable to the {role}
4. Suggest negotiation opportunities backed by market data
5. Use ONLY these assessment values: FAVORABLE, STANDARD, UNFAVORABLE

Required JSON format:
{schema}"""
