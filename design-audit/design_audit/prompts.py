"""
Prompt Builders

System prompts and user turns sent to the vision model for the design
audit and for the functionality check.
"""

from typing import Optional

from .models import AuditConfig
from .rules import MASTER_RULES, PersonaProfile

AUDIT_RESPONSE_FORMAT = """{
  "overallScore": <number 0-100>,
  "summary": "<2-3 sentence summary in persona-appropriate tone>",
  "riskLevel": "<Low|Medium|High>",
  "categories": [
    {
      "name": "<category name>",
      "score": <number 0-100>,
      "icon": "<single emoji>",
      "issues": [
        {
          "id": "<unique id like USR-01>",
          "ruleId": "<rule ID like H1, A3, V2>",
          "principle": "<short principle name>",
          "title": "<short descriptive title>",
          "description": "<what's wrong and why it matters>",
          "severity": "<critical|warning|info>",
          "category": "<category name>",
          "suggestion": "<specific actionable fix>",
          "x": <number 0-100>,
          "y": <number 0-100>
        }
      ]
    }
  ]
}"""


def _screen_context(screen_name: Optional[str]) -> str:
    return f'\nScreen being audited: "{screen_name}".' if screen_name else ""


def build_audit_prompt(persona: PersonaProfile, config: AuditConfig) -> str:
    """
    Build the audit system prompt.

    Merges the persona profile, the rules corpus and the request context
    (fidelity, purpose, screen name).
    """
    return f"""You are the world's most comprehensive UX/UI auditor. You have deep expertise in all major design frameworks, psychological principles, accessibility standards, and platform guidelines.

## YOUR PERSONA
Focus: {persona.focus}
Tone: {persona.tone}
Rule Weights: {persona.rule_weights}
Priority Rules: {persona.priorities}

{MASTER_RULES}

## ANALYSIS INSTRUCTIONS
You are analyzing a UI/UX design screenshot. Perform a thorough audit using the rules above.
Design context: Fidelity = "{config.fidelity}", Purpose = "{config.purpose}".{_screen_context(config.screen_name)}

IMPORTANT: If the image appears blank, empty, or entirely one color, return a score of 0 and explain this clearly. Do NOT invent issues for a blank screen.

For each issue found:
1. Identify which rule(s) it violates (use rule IDs like H1, A3, V2, L5, etc.)
2. Estimate the x,y position on the image as a percentage (0-100)
3. Provide a specific, actionable fix suggestion
4. Assign severity: critical (blocks usability/compliance), warning (degrades experience), info (polish opportunity)

Weight your scoring based on: {persona.rule_weights}

You MUST respond with ONLY a valid JSON object (no markdown, no backticks, no trailing text) in this exact format:
{AUDIT_RESPONSE_FORMAT}

CRITICAL: Return ONLY the JSON object. No text before or after. No markdown fences. Return 4-8 categories with 1-4 issues each. Every issue MUST have x,y coordinates, ruleId, and principle."""


def audit_user_text(config: AuditConfig) -> str:
    return (
        "Analyze this design screenshot and provide a comprehensive UX audit "
        "with positioned annotations for each issue." + _screen_context(config.screen_name)
    )


def build_functionality_prompt(screen_name: Optional[str] = None) -> str:
    """Build the system prompt for the good/mixed/bad functionality check"""
    screen_context = f'Screen: "{screen_name}".' if screen_name else ""

    return f"""You are a senior UX consultant evaluating the FUNCTIONALITY of a UI screen.

Focus on:
- Is the user flow clear? Can users accomplish their goal?
- Are CTAs obvious and well-placed?
- Is navigation intuitive?
- Are form inputs properly structured?
- Are error states, empty states, and loading states handled?
- Is the information architecture logical?
- Are interactive elements discoverable?
- Is the screen's purpose immediately clear?

{screen_context}

Rate the functionality as:
- "good" (score >= 75): Well-designed, users can accomplish tasks efficiently
- "mixed" (score 40-74): Has issues but partially functional
- "bad" (score < 40): Major functionality problems that block users

Respond with ONLY valid JSON:
{{
  "verdict": "good" | "mixed" | "bad",
  "score": <number 0-100>,
  "summary": "<2-3 sentence overview>",
  "strengths": ["<strength 1>", "<strength 2>"],
  "weaknesses": ["<weakness 1>", "<weakness 2>"],
  "recommendations": ["<actionable fix 1>", "<actionable fix 2>"]
}}

CRITICAL: Return ONLY JSON. No markdown. No backticks. 2-4 items per array."""


FUNCTIONALITY_USER_TEXT = "Evaluate the functionality of this UI screen. Is it good or bad for users?"
