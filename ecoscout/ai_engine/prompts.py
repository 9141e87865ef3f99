"""Prompt templates and sampling presets for product analysis."""

from __future__ import annotations

from ecoscout.ai_engine.client import GenerationSettings

ANALYSIS_SCHEMA = """{
  "product_name": "string",
  "brand": "string",
  "category": "string",
  "eco_score": "number (0-100, where 100 is most eco-friendly)",
  "confidence": "number (0.0-1.0, how confident you are in the identification)",
  "reasoning": "string (a brief explanation of the eco_score and identification)",
  "alternatives": [
    {"product_name": "string (a more eco-friendly alternative)", "reasoning": "string (why it's a better choice)"}
  ]
}"""

FAST_SCHEMA = """{
  "product_name": "string",
  "brand": "string",
  "category": "string",
  "eco_score": "number 0-100",
  "confidence": "number 0.0-1.0",
  "reasoning": "string, one short sentence",
  "alternatives": [{"product_name": "string", "reasoning": "string, a few words"}]
}"""

GENERIC_IMAGE_DESCRIPTION = "an everyday consumer product photographed by a shopper"

TEXT_SETTINGS = GenerationSettings(temperature=0.4, top_k=32, top_p=1.0, max_output_tokens=2048)
SCOUT_SETTINGS = GenerationSettings(temperature=0.7, top_p=0.95, max_output_tokens=1024)
IMAGE_STANDARD_SETTINGS = GenerationSettings(
    temperature=0.4, top_k=32, top_p=1.0, max_output_tokens=2048
)
IMAGE_FAST_SETTINGS = GenerationSettings(
    temperature=0.1, top_k=1, top_p=1.0, max_output_tokens=512
)


def text_prompt(query: str) -> str:
    return (
        f'Analyze this product query: "{query}". The query could be a product name '
        "or a barcode number.\n"
        "Provide a detailed sustainability analysis in JSON format.\n"
        f"The JSON object must follow this exact structure:\n{ANALYSIS_SCHEMA}\n"
        "If the query is a barcode, try to identify the corresponding product. "
        "If it's a name, identify the most common product for that name.\n"
        "Suggest at most 3 alternatives. Respond with the JSON object only."
    )


def scout_prompt(query: str) -> str:
    return (
        "You are a product scout helping a shopper who could not get a definitive "
        f'identification for "{query}".\n'
        "Make your best guess at the product it most likely refers to and estimate "
        "its environmental sustainability. A rough answer is better than no answer; "
        "lower the confidence value to reflect uncertainty instead of refusing.\n"
        f"Answer with a single JSON object in this structure:\n{ANALYSIS_SCHEMA}"
    )


def image_prompt(fast_mode: bool) -> str:
    if fast_mode:
        return (
            "Identify the main product in this camera frame for a live overlay. "
            "Be brief. Return only this JSON object, no markdown:\n"
            f"{FAST_SCHEMA}\n"
            "At most 2 alternatives. If unsure, give a best guess with low confidence."
        )
    return (
        "Analyze the product in this image. Provide a detailed sustainability "
        "analysis in JSON format.\n"
        f"The JSON object must follow this exact structure:\n{ANALYSIS_SCHEMA}\n"
        "Identify the main product, considering packaging materials, visible "
        "certifications and brand. If no product is visible, provide a best guess."
    )
