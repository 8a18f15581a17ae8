"""
Prompt and response-schema builders for every LLM call in the pipeline.

Each builder returns the ordered message list for one call; schemas are the
strict JSON schemas sent as ``response_format``.
"""

from models.project import RiskFinding, SectionSpec

Messages = list[dict[str, str]]

REFINED_SECTIONS_SCHEMA = {
    "type": "object",
    "properties": {
        "sections": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                    "keyPoints": {"type": "array", "items": {"type": "string"}},
                    "estimatedLength": {"type": "number"},
                },
                "required": ["id", "title", "description", "keyPoints", "estimatedLength"],
            },
        }
    },
    "required": ["sections"],
}

KEYWORDS_SCHEMA = {
    "type": "object",
    "properties": {"keywords": {"type": "array", "items": {"type": "string"}}},
    "required": ["keywords"],
}

RISK_IDENTIFICATION_SCHEMA = {
    "type": "object",
    "properties": {
        "risks": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "severity": {"type": "string", "enum": ["low", "medium", "high"]},
                    "originalText": {"type": "string"},
                    "riskType": {"type": "string"},
                    "location": {"type": "string"},
                },
                "required": ["title", "severity", "originalText", "riskType", "location"],
            },
        },
        "summary": {"type": "string"},
    },
    "required": ["risks", "summary"],
}


def _numbered(items) -> str:
    return "\n".join(f"{idx}. {item}" for idx, item in enumerate(items, start=1))


def _writer_system_prompt(content_type: str, with_research: bool) -> str:
    kind = content_type.lower()
    guidelines = [
        "Write in a professional yet accessible tone",
        "Use clear, concise language appropriate for the content type",
    ]
    if with_research:
        guidelines += [
            "Include relevant examples, data, or insights from both the context and search results",
            "When incorporating information from search results, ensure accuracy and cite credible sources",
        ]
    else:
        guidelines.append("Include relevant examples, data, or insights when appropriate")
    guidelines += [
        "Ensure smooth transitions and logical flow",
        "Match the estimated length while maintaining quality",
        "Make the content actionable and valuable to readers",
        "Use appropriate formatting (headings, bullet points, etc.) when helpful",
    ]
    if with_research:
        guidelines += [
            "Prioritize current and factual information from search results",
            "Blend the provided context with fresh search insights naturally",
        ]
    else:
        guidelines.append("Ensure accuracy and credibility in all statements")

    sources = "using both the provided context and recent search results" if with_research else ""
    return (
        f"You are a professional content writer specializing in creating high-quality {kind}s. "
        f"Your task is to write engaging, informative, and well-structured content sections {sources}".rstrip()
        + ".\n\nGuidelines:\n"
        + _numbered(guidelines)
    )


def section_refinement_messages(
    title: str, content_type: str, context: str, outline_titles: list[str]
) -> Messages:
    system = (
        "You are an expert content strategist and writer. Your task is to refine and improve "
        "content sections based on the project context, content type, and source materials.\n\n"
        "Guidelines:\n"
        + _numbered(
            [
                "Analyze the original sections and improve them for better structure and flow",
                "Ensure sections are appropriate for the specified content type",
                "Consider the context and source materials when refining sections",
                "Each section should have a clear purpose and contribute to the overall narrative",
                "Provide key points that should be covered in each section",
                "Estimate appropriate length for each section (in words)",
                "Ensure logical progression and coherent structure",
            ]
        )
        + "\n\nRespond with a JSON object containing the refined sections."
    )
    user = (
        f'Please refine these content sections for a {content_type} titled "{title}".\n\n'
        f"Original Sections:\n{_numbered(outline_titles)}\n\n"
        f"Context and Source Materials:\n{context}\n\n"
        "Requirements:\n"
        "- Ensure sections flow logically and build upon each other\n"
        "- Make titles specific and compelling\n"
        "- Provide 3-5 key points for each section\n"
        "- Estimate word count for each section (typically 200-600 words per section)\n"
        f"- Consider the target audience and purpose of this {content_type.lower()}\n"
        "- Ensure comprehensive coverage of the topic while maintaining focus"
    )
    return [{"role": "system", "content": system}, {"role": "user", "content": user}]


def keyword_extraction_messages(spec: SectionSpec, context: str) -> Messages:
    system = (
        "You are an expert at extracting search keywords for research purposes. Your task is to "
        "identify 3-5 specific search terms that would help find the most relevant and current "
        "information for writing a section.\n\n"
        "Guidelines:\n"
        + _numbered(
            [
                "Focus on concrete, searchable terms rather than abstract concepts",
                "Include specific names, technologies, companies, or concepts mentioned",
                "Consider current trends and recent developments",
                "Prioritize terms that would yield factual, authoritative results",
                "Avoid overly generic terms",
            ]
        )
        + "\n\nReturn only the keywords as a JSON array."
    )
    user = (
        "Extract search keywords for research to write this section:\n\n"
        f"Section Title: {spec.title}\n"
        f"Section Description: {spec.description}\n\n"
        f"Key Points to Cover:\n{_numbered(spec.key_points)}\n\n"
        f"Project Context:\n{context}\n\n"
        "Please extract 3-5 specific search keywords that would help find the most relevant "
        "current information for writing this section."
    )
    return [{"role": "system", "content": system}, {"role": "user", "content": user}]


def section_writing_messages(
    spec: SectionSpec,
    project_title: str,
    content_type: str,
    context: str,
    *,
    with_research: bool,
) -> Messages:
    """Messages for the section body; ``with_research`` selects the enriched variant."""
    context_label = (
        "Enhanced Context with Search Results" if with_research else "Context and Reference Materials"
    )
    closing = (
        "Please write a comprehensive, well-structured section that covers all key points while "
        "incorporating relevant information from both the provided context and the search results. "
        "Ensure the content is current, accurate, and flows naturally."
        if with_research
        else "Please write a comprehensive, well-structured section that covers all key points while "
        "maintaining engagement and professional quality. Use appropriate formatting and ensure "
        "the content flows naturally."
    )
    user = (
        f'Write a section for a {content_type} titled "{project_title}".\n\n'
        f"Section Title: {spec.title}\n"
        f"Section Description: {spec.description}\n"
        f"Target Length: Approximately {spec.estimated_length} words\n\n"
        f"Key Points to Cover:\n{_numbered(spec.key_points)}\n\n"
        f"{context_label}:\n{context}\n\n"
        f"{closing}"
    )
    return [
        {"role": "system", "content": _writer_system_prompt(content_type, with_research)},
        {"role": "user", "content": user},
    ]


COHERENCE_SYSTEM_PROMPT = """You are an expert content editor with a meticulous eye for consistency and professional writing standards. Transform the content into a cohesive, professional piece that reads as if written by a single expert author.

CONSISTENCY REQUIREMENTS:

1. Formatting and structure: standardize ALL numbering systems (pick ONE style and apply it throughout), keep a consistent heading hierarchy (#, ##, ###), one bullet style, uniform spacing.
2. Tone and voice: establish ONE authorial voice, remove tonal shifts between sections, keep one level of formality and one grammatical person.
3. Terminology: use identical terms for the same concepts, standardize abbreviations (spell out on first use), consistent capitalization and punctuation.
4. Flow: natural bridges between sections, no redundant or repeated statements, ideas progress from simple to complex.
5. Polish: consistent sentence structure and citation style.

The result should feel like a single expert wrote the entire piece."""


def coherence_messages(project_title: str, content_type: str, full_content: str) -> Messages:
    user = (
        f'Transform this {content_type} titled "{project_title}" into a professionally consistent '
        "and cohesive piece. Pay special attention to creating uniformity in formatting, tone, "
        "and structure.\n\n"
        f"CONTENT TO REFINE:\n{full_content}\n\n"
        "SPECIFIC REFINEMENT TASKS:\n"
        + _numbered(
            [
                "Standardize ALL numbering and formatting with one consistent numbering scheme",
                "Unify the authorial voice",
                "Eliminate formatting inconsistencies in headings, bullet points and spacing",
                "Smooth transitions between sections",
                "Remove redundancy while preserving key information",
                "Use consistent terminology for the same concepts",
                "Keep a consistent formality level and writing quality",
                "Tie all sections together with a strong, unified conclusion",
            ]
        )
        + "\n\nReturn the complete refined content with all sections included, maintaining the "
        "original structure while achieving consistency and professional quality."
    )
    return [
        {"role": "system", "content": COHERENCE_SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]


def modification_messages(
    content: str, user_message: str, project_title: str, content_type: str
) -> Messages:
    system = (
        "You are an expert content editor. Your task is to modify the provided content based on "
        "user feedback while maintaining the core message and structure.\n\n"
        "Guidelines:\n"
        + _numbered(
            [
                "Carefully analyze the user's feedback to understand what changes they want",
                "Make targeted modifications while preserving the essential information",
                "Maintain consistent quality and professional standards",
                "If asked to change tone, adjust the language style appropriately",
                "If asked to change length, add or remove content strategically",
                "Ensure the modified content remains coherent and well-structured",
                "Return the complete revised content, not just the changes",
            ]
        )
        + "\n\nAlways provide the full updated content after making the requested modifications."
    )
    user = (
        f'Please modify this {content_type} titled "{project_title}" based on the user\'s feedback.\n\n'
        f"Current Content:\n{content}\n\n"
        f"User Feedback: {user_message}\n\n"
        "Please provide the complete updated content incorporating the requested changes."
    )
    return [{"role": "system", "content": system}, {"role": "user", "content": user}]


def conversation_messages(
    content: str,
    user_message: str,
    project_title: str,
    content_type: str,
    history: list[dict[str, str]],
) -> Messages:
    system = (
        f"You are a professional content writing assistant helping users refine their {content_type}. "
        "You provide helpful advice, answer questions about the content, and suggest improvements.\n\n"
        "Guidelines:\n"
        + _numbered(
            [
                "Be helpful and constructive in your responses",
                "Provide specific actionable advice when possible",
                "Ask clarifying questions if the user's request is unclear",
                "Suggest concrete improvements for content quality",
                "Be encouraging and supportive",
                "Reference the content when relevant to your response",
            ]
        )
        + f'\n\nYou are currently helping with a {content_type} titled "{project_title}".'
    )
    transcript = "\n".join(f"{msg.get('role')}: {msg.get('content')}" for msg in history)
    user = (
        f"Here's the current content:\n\n{content}\n\n"
        f"Conversation so far:\n{transcript}\n\n"
        f"User's latest message: {user_message}\n\n"
        "Please provide a helpful response."
    )
    return [{"role": "system", "content": system}, {"role": "user", "content": user}]


def risk_identification_messages(contract_text: str) -> Messages:
    system = (
        "You are an expert legal contract analyst specializing in identifying potential risks and "
        "problematic clauses in contracts. Carefully read the contract and identify specific risks "
        "with their exact text from the document.\n\n"
        "Guidelines:\n"
        + _numbered(
            [
                "Focus on actual risks and unfavorable terms, not general observations",
                "Extract the EXACT text from the contract that contains the risk (word-for-word quotes)",
                "Classify severity: high (immediate legal/financial danger), medium (potentially "
                "problematic), low (minor concerns)",
                "Identify the type of risk (liability, termination, payment, indemnification, ...)",
                "Specify the location/section where the risk was found",
                "Only include risks that could genuinely impact the signing party negatively",
            ]
        )
        + "\n\nRespond with a JSON object containing the identified risks and a brief summary."
    )
    user = (
        "Please analyze this contract and identify specific legal risks with their exact text "
        f"from the document:\n\n{contract_text}\n\n"
        "Focus on finding:\n"
        "- Unlimited liability clauses\n"
        "- Unfair termination conditions\n"
        "- Problematic payment terms\n"
        "- Broad indemnification requirements\n"
        "- Unclear or missing protections\n"
        "- Automatic renewal terms\n"
        "- Dispute resolution limitations\n"
        "- Intellectual property concerns\n"
        "- Confidentiality overreach\n"
        "- Performance guarantees or penalties\n\n"
        "For each risk, provide the exact text from the contract that creates the risk."
    )
    return [{"role": "system", "content": system}, {"role": "user", "content": user}]


def risk_detail_messages(finding: RiskFinding, contract_text: str) -> Messages:
    system = (
        "You are a senior legal counsel specializing in contract risk assessment and negotiation. "
        "Provide a detailed analysis of a specific contract risk and actionable recommendations "
        "for addressing it.\n\n"
        "Provide:\n"
        + _numbered(
            [
                "Detailed explanation of why this is problematic",
                "Potential business and legal impacts",
                "Specific legal risks that could materialize",
                "Prioritized recommendations for addressing the issue",
                "Suggested alternative text that would be more favorable",
            ]
        )
        + "\n\nBe practical, specific, and business-focused. Always write the suggested "
        "replacement text in the same language as the original problematic text."
    )
    user = (
        "Please provide a detailed analysis of this contract risk:\n\n"
        f"**Risk Title:** {finding.title}\n"
        f"**Severity:** {finding.severity.value}\n"
        f"**Risk Type:** {finding.risk_type}\n"
        f"**Location:** {finding.location}\n"
        f'**Original Problematic Text:**\n"{finding.original_text}"\n\n'
        f"**Full Contract Context:**\n{contract_text}\n\n"
        "Format your response as a JSON object with the following structure:\n"
        "{\n"
        '  "detailedExplanation": "...",\n'
        '  "businessImpact": "...",\n'
        '  "legalRisks": ["risk1", "risk2"],\n'
        '  "recommendations": [{"action": "...", "priority": "high|medium|low", '
        '"effort": "low|medium|high"}],\n'
        '  "suggestedNewText": "..."\n'
        "}"
    )
    return [{"role": "system", "content": system}, {"role": "user", "content": user}]
