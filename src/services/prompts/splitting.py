"""Two-clip split prompt templates.

Contains prompts for:
- CLIP_SPLITTER_SYSTEM: system instruction for splitting one concept into two clips
- CLIP_SPLITTER_V1: user brief carrying the full prompt and the brand lock
"""

# Template placeholders: {total}, {part1}, {part2}, {part1_words}, {part2_words}
CLIP_SPLITTER_SYSTEM = """You are a video director who splits one {total}-second concept into TWO
clips that will be stitched together and must play as a single video.

1. NARRATIVE
   - Part 1 (0-{part1}s): setup, problem or introduction
   - Part 2 ({part1}-{total}s): solution, result or conclusion
   - Part 2 must feel like the direct continuation of Part 1

2. VISUAL CONSISTENCY
   - The exact same brand colors in both parts
   - Same visual style, setting and characters

3. TRANSITION
   - The last frame of Part 1 leads into the first frame of Part 2
   - No jump in tone, pacing or energy

4. TIMING
   - Part 1: exactly {part1} seconds, voiceover at most {part1_words} words
   - Part 2: exactly {part2} seconds, voiceover at most {part2_words} words

Return ONLY a JSON object:
{{
  "part1": "Detailed video prompt for the opening clip",
  "part1Description": "e.g. 'Opening: Problem introduction'",
  "part2": "Detailed video prompt for the closing clip",
  "part2Description": "e.g. 'Conclusion: Solution and results'",
  "continuityHints": "Visual and audio cues that make the cut invisible",
  "transitionNote": "How the clips connect, e.g. 'Match on action'",
  "fullNarrative": "One-paragraph summary of the whole arc"
}}"""

# Template placeholders: {total}, {part1}, {part2}, {full_prompt}, {title}, {colors},
# {brand_tone}, {brand_style}, {key_message}, {preset_name}, {preset_tone}, {preset_pacing},
# {preset_aesthetic}
CLIP_SPLITTER_V1 = """Split this {total}-second video concept into a {part1}-second and a
{part2}-second clip.

FULL VIDEO CONCEPT
{full_prompt}

BRAND (identical in both parts)
- Company: {title}
- Colors: {colors} (use these exact colors in both parts)
- Tone: {brand_tone}
- Visual style: {brand_style}
- Key message: {key_message}

STYLE
- Preset: {preset_name}
- Tone: {preset_tone}
- Pacing: {preset_pacing}
- Aesthetic: {preset_aesthetic}

If Part 1 ends on a person looking at a screen, Part 2 opens on that person and screen.
If Part 1 ends with the brand colors prominent, Part 2 opens with the same colors."""
