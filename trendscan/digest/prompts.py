"""
Summarization prompts.

One prompt per scan. The content style picks the script-format block and the
platform name; caller topics add a focus-areas line.
"""

from __future__ import annotations

from typing import Sequence

from trendscan.core.enums import ContentStyle

TRENDS_PER_DIGEST = 5
SCRIPT_MAX_WORDS = 100

PLATFORM_NAMES = {
    ContentStyle.TIKTOK: "TikTok",
    ContentStyle.YOUTUBE: "YouTube",
    ContentStyle.LINKEDIN: "LinkedIn",
    ContentStyle.TWITTER: "Twitter/X",
    ContentStyle.NEWSLETTER: "Newsletter",
}

STYLE_PROMPTS = {
    ContentStyle.TIKTOK: """SCRIPT FORMAT (30-45 seconds read aloud):
- Start with a pattern-interrupt hook
- Tell the story in plain English in two or three sentences
- Make it personal: why should the viewer care?
- Close on a hot take or a question that invites comments

Tone: casual and a little irreverent, as if talking to a smart friend who is not technical.""",
    ContentStyle.YOUTUBE: """SCRIPT FORMAT (60-90 seconds read aloud):
- Open with a hook that sets up the story
- Give the context: who, what, when
- Walk through the key details with a concrete example
- Explain what it means for the viewer
- End with your take and an invitation to comment

Tone: informative but conversational, a knowledgeable friend breaking down the news.""",
    ContentStyle.LINKEDIN: """SCRIPT FORMAT (LinkedIn post, 150-200 words):
- Lead with a thought-provoking observation or number
- Spell out the business or professional implications
- Offer a balanced analysis
- Finish with a takeaway or a discussion question

Tone: professional and accessible. Insight over hype; focus on business impact.""",
    ContentStyle.TWITTER: """SCRIPT FORMAT (X thread, 4-6 posts):
- Post 1 is a scroll-stopping hook
- Middle posts carry one punchy, quotable point each
- The last post is a hot take or a question

Tone: sharp and witty. Each post should stand alone while building the thread.""",
    ContentStyle.NEWSLETTER: """SCRIPT FORMAT (newsletter paragraph, 150-200 words):
- Open with the news itself
- Explain what happened and why it is significant
- Add the context readers need to judge the implications
- End with a forward-looking takeaway

Tone: like a smart friend catching you up over coffee.""",
}

RESPONSE_CONTRACT = """{{
  "trends": [
    {{
      "title": "Catchy title here",
      "category": "models|tools|research|drama|tutorials",
      "summary": "2-3 sentences explaining what happened",
      "why_it_matters": "1 sentence for normal people",
      "content_angle": "Short hook idea for {platform}",
      "script": "Full script optimized for {platform} (under {max_words} words)",
      "sources": [{{"url": "", "platform": "", "title": ""}}],
      "engagement_score": 0
    }}
  ]
}}"""

PROMPT_TEMPLATE = """You are an AI trend researcher for {platform} creators. Below is ranked data from several sources about what is trending in AI.

Your job:
1. Identify the {count} most important or interesting AI trends in this data
2. For each, write a short summary a non-technical person can understand
3. Suggest a {platform} content angle (hook or take)
4. Write a script optimized for {platform}. Keep scripts under {max_words} words.
{focus}
{style}

Raw data:
{data}

IMPORTANT: Respond with ONLY valid JSON in exactly this structure (no markdown code fences, no text before or after). engagement_score is an integer from 0 to 100.
{contract}"""


def build_prompt(
    formatted_data: str,
    content_style: ContentStyle = ContentStyle.TIKTOK,
    topics: Sequence[str] = (),
) -> str:
    """Render the single summarization prompt for one scan."""
    style = ContentStyle(content_style)
    platform = PLATFORM_NAMES[style]
    focus = ""
    if topics:
        focus = f"\nFOCUS AREAS: Prioritize trends related to these topics: {', '.join(topics)}\n"

    return PROMPT_TEMPLATE.format(
        platform=platform,
        count=TRENDS_PER_DIGEST,
        max_words=SCRIPT_MAX_WORDS,
        focus=focus,
        style=STYLE_PROMPTS[style],
        data=formatted_data,
        contract=RESPONSE_CONTRACT.format(platform=platform, max_words=SCRIPT_MAX_WORDS),
    )
