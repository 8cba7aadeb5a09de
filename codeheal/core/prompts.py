"""AI prompt templates for fix suggestion."""

FIX_SUGGESTION_PROMPT = """\
You are an expert code reviewer. Fix the reported defect in the source \
excerpt below with the smallest possible change.

Defect:
{defect}

Source excerpt (lines {first_line}-{last_line}, each prefixed by its \
1-based line number and a bar; the prefix is NOT part of the code):

{excerpt}

Respond with ONLY valid JSON. Use this exact structure:

{{
  "suggestions": [
    {{
      "title": "<brief fix title>",
      "description": "<what the fix changes and why it resolves the defect>",
      "confidence": <0.0-1.0>,
      "edits": [
        {{
          "kind": "insert" | "delete" | "replace",
          "start": {{"line": <line>, "column": <column>}},
          "end": {{"line": <line>, "column": <column>}} | null,
          "text": "<new text>" | null
        }}
      ]
    }}
  ]
}}

Edit semantics:
- Positions are 1-based and refer to the full file, use the line numbers shown
- insert: put "text" at "start"
- delete with "end": remove [start, end); delete without "end": remove line start.line
- replace with "end": replace [start, end) with "text"; without "end": \
replace the whole content of line start.line with "text"
- Edits of one suggestion are applied in order, each against the result of the previous one

Rules:
- Propose at most 3 suggestions, best first
- Do NOT rewrite code unrelated to the defect
- If you cannot fix the defect, return an empty "suggestions" list
"""
