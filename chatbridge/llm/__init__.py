"""LLM access package.

Architectural role:
    Provides configuration, data contracts, Gemini transport and the ordered
    fallback resolver used by orchestration to generate text.

Module split:
    - `models`: candidate/attempt records and the error taxonomy.
    - `provider_config`: environment-driven credential and candidate list.
    - `client`: single-attempt HTTP transport and response parsing.
    - `service`: ordered fallback resolution across candidates.
"""
