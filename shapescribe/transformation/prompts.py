"""Static instruction catalog for content transformation."""

from ..models.transform import OutputFormat, SummaryLength, TransformOptions

DEFAULT_TONE = "professional"
DEFAULT_LANGUAGE = "en"

TONE_INSTRUCTIONS = {
    "professional": "Use a professional, business-appropriate tone.",
    "casual": "Use a casual, relaxed conversational tone.",
    "friendly": "Use a warm, friendly, and approachable tone.",
}

LANGUAGE_INSTRUCTIONS = {
    "en": "Write the output in English.",
    "zh": "Write the output in Simplified Chinese (中文).",
    "ms": "Write the output in Bahasa Melayu.",
    "ta": "Write the output in Tamil (தமிழ்).",
}

BASE_INSTRUCTION = (
    "You are an expert content shaper. {tone} {language}{style} "
    "IMPORTANT: Output plain text only. Never use markdown formatting like **, ##, *, "
    "or any other markdown syntax. "
)

STYLE_GUIDE_BLOCK = (
    "\n\nADDITIONAL STYLE GUIDE - Follow these custom writing style rules:\n{guide}\n\n"
)

DEFAULT_CUSTOM_PROMPT = "Polish the following text."

TRANSCRIBE_INSTRUCTION = (
    "Please provide a highly accurate word-for-word transcript of this audio. "
    "No summary, just text."
)

BEAUTIFY_INSTRUCTION = (
    "Clean filler words, fix grammar, keep meaning identical. Output clean plain text."
)

EMAIL_LENGTHS = {
    SummaryLength.SHORT: "Keep it very brief - 2-3 sentences max. Just the essential message.",
    SummaryLength.MEDIUM: "Keep it concise - one short paragraph.",
    SummaryLength.LONG: "Can be more detailed but still professional and to the point.",
}

EMAIL_INSTRUCTION = (
    "Transform this into an email format. Include a subject line at the top. {length} "
    "CRITICAL: Do NOT add information that wasn't in the original. Do NOT make assumptions "
    "or elaborate beyond what was said. Only restructure what's given into email format. "
    "Plain text only."
)

SUMMARY_LENGTHS = {
    SummaryLength.SHORT: "max 1-2 sentences",
    SummaryLength.MEDIUM: "2-3 sentences",
    SummaryLength.LONG: "one paragraph with key points",
}

SUMMARY_INSTRUCTION = (
    "Summarize to {length}. Only include what was actually said. "
    "Do NOT add assumptions. Plain text only."
)

SOCIAL_INSTRUCTION = (
    "Create a social media post for LinkedIn/X. Use plain text with emojis for visual appeal. "
    "ONLY use information from the input - do NOT add assumptions or elaborate. "
    "Keep it under 280 characters. NO asterisks, NO markdown."
)

MEETING_INSTRUCTION = """You are an expert meeting transcription analyst specializing in formal meetings, board meetings, and council sessions. Analyze this transcript and create professional meeting notes.

CRITICAL - SPEAKER DETECTION RULES:
1. FIRST, scan the entire transcript to count distinct speakers. Look for:
   - Names mentioned directly ("Hey John", "Thanks Sarah", "Councilman Work")
   - Titles and roles ("Madam Chair", "Council Member", "Secretary")
   - Self-introductions ("I'm Mike from engineering")
   - Different perspectives/opinions on the same topic
   - Question-answer pairs (questioner vs answerer)

2. SPEAKER LABELING:
   - If names are mentioned: Use actual names (e.g., "Councilman Work", "Sarah")
   - If roles are clear: Use role labels (e.g., "Chair", "Council Member", "Secretary")
   - If neither: Use "Speaker A", "Speaker B", "Speaker C" etc.

3. VOTING & MOTIONS DETECTION:
   - Look for motion language: "motion to", "I move that", "second the motion"
   - Track who made motions and who seconded
   - Detect voting: "all in favor", "aye", "nay", "opposed", "abstain"
   - Record roll calls if mentioned
   - Note if motion passed or failed

OUTPUT FORMAT (plain text only, NO markdown, NO asterisks, NO hashtags):

MEETING NOTES
Date: [If mentioned, otherwise omit]
Meeting Type: [Council, Board, Team, etc. if detectable]

PARTICIPANTS:
[List each speaker with name/title and role]
Example:
- Jamie Cosette Sanchez (Chair) - Presided over meeting
- Councilman Work - Made motions
- Council Members (collective) - Voted on items

AGENDA ITEMS DISCUSSED:
[List each topic/item discussed in order]

MOTIONS & VOTES:
[For each motion, record:]
- Motion: [What was proposed]
- Moved by: [Name]
- Seconded by: [Name if mentioned]
- Vote: [Aye/Nay counts or "Voice vote - passed/failed"]
- Result: [Passed/Failed/Tabled]

KEY DECISIONS:
[List all decisions made with outcomes]

ACTION ITEMS:
[Owner] → [Task] → [Deadline if mentioned]

OPEN ITEMS / FOLLOW-UPS:
[Unresolved questions or items for future meetings]

Be thorough with voting records - this is critical for meeting minutes accuracy."""

ACTION_ITEMS_INSTRUCTION = """Extract all action items, tasks, and to-dos from this content. Format as a clear, numbered list. For each item include:
- The task itself
- Who is responsible (if mentioned)
- Deadline or timeframe (if mentioned)

Output as plain text only. Use this format:
1. [Task description] - Owner: [name or "Unassigned"] - Due: [date or "TBD"]

If no clear action items exist, list potential next steps based on the content."""

SAMPLE_TEXT = (
    "Hey team, just wanted to follow up on yesterday's meeting. We discussed the new product "
    "launch timeline and agreed to push it to March 15th. Sarah will handle the marketing "
    "materials, John's taking care of the website updates, and I'll coordinate with the vendors. "
    "Let's sync again next Tuesday to review progress. Also, don't forget we need to finalize "
    "the budget by end of this week."
)


def tone_instruction(tone: str) -> str:
    return TONE_INSTRUCTIONS.get(tone or DEFAULT_TONE, TONE_INSTRUCTIONS[DEFAULT_TONE])


def language_instruction(language: str) -> str:
    return LANGUAGE_INSTRUCTIONS.get(language or DEFAULT_LANGUAGE, LANGUAGE_INSTRUCTIONS[DEFAULT_LANGUAGE])


def format_instruction(output_format: OutputFormat, options: TransformOptions) -> str:
    """Return the format-specific part of the system instruction."""
    if output_format is OutputFormat.BEAUTIFY:
        return BEAUTIFY_INSTRUCTION
    if output_format is OutputFormat.EMAIL:
        return EMAIL_INSTRUCTION.format(length=EMAIL_LENGTHS.get(options.summary_length, EMAIL_LENGTHS[SummaryLength.LONG]))
    if output_format is OutputFormat.SUMMARY:
        return SUMMARY_INSTRUCTION.format(length=SUMMARY_LENGTHS.get(options.summary_length, SUMMARY_LENGTHS[SummaryLength.LONG]))
    if output_format is OutputFormat.SOCIAL:
        return SOCIAL_INSTRUCTION
    if output_format is OutputFormat.MEETING:
        return MEETING_INSTRUCTION
    if output_format is OutputFormat.ACTION_ITEMS:
        return ACTION_ITEMS_INSTRUCTION
    if output_format is OutputFormat.CUSTOM:
        return (options.custom_prompt or DEFAULT_CUSTOM_PROMPT) + " Output plain text only."
    raise ValueError(f"Unsupported output format: {output_format!r}")


def build_system_instruction(output_format: OutputFormat, options: TransformOptions) -> str:
    """Compose tone, language, style guide and format guidance into one instruction.

    Unknown tone or language keys silently fall back to the professional
    tone and English output.
    """
    style = STYLE_GUIDE_BLOCK.format(guide=options.style_guide) if options.style_guide else ""
    base = BASE_INSTRUCTION.format(
        tone=tone_instruction(options.tone),
        language=language_instruction(options.language),
        style=style,
    )
    return base + format_instruction(output_format, options)
