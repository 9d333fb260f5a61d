"""
Centralized LLM prompts for email drafting.
"""

DRAFT_EMAIL_SYSTEM = """You are an assistant at a personal lines insurance agency. You help the agent write clear, friendly and professional emails to clients whose new policies are still waiting on underwriting requirements. Never invent coverage details, prices or deadlines that are not in the policy context."""

DRAFT_EMAIL_PROMPT = """Write an email for the client described below, following the agent's instruction.

AGENT INSTRUCTION:
{instruction}

POLICY CONTEXT:
- Client: {client_name}
- Client email: {client_email}
- Client phone: {client_phone}
- Carrier: {carrier}
- Policy type: {policy_type}
- Policy number: {policy_number}
- Effective date: {effective_date}
- Follow-up date: {follow_up_date}
- Policy status: {status}

REQUIREMENTS CHECKLIST:
{requirements}

RECENT COMMUNICATION NOTES (newest first):
{notes}

Return only the email body as simple HTML (paragraphs, lists and bold text are fine). Do not include <html>, <head> or <body> tags, a subject line, or markdown code fences."""

DRAFT_ERROR_HTML = """<div class="draft-error">There was an error generating the response: {reason}</div>"""

DEFAULT_DRAFT_INSTRUCTION = "Draft a friendly follow-up email about the outstanding documents."
