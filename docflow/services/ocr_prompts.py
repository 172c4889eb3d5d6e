_OCR_PROMPTS: dict[str, str] = {
    "invoice": (
        "Extract all text from this invoice image. Include: company names, addresses, "
        "invoice number, date, line items with quantities and prices, totals, and payment terms."
    ),
    "receipt": (
        "Extract all text from this receipt. Include: store name, date, items purchased, "
        "prices, subtotal, tax, and total."
    ),
    "form": (
        "Extract all text from this form, including field labels and filled-in values. "
        "Maintain the structure showing which values belong to which fields."
    ),
    "table": (
        "Extract all text from this table/spreadsheet image. "
        "Preserve the row and column structure as much as possible."
    ),
    "legal": (
        "Extract all text from this legal document/contract. "
        "Include headers, paragraphs, clauses, and any signature blocks."
    ),
    "handwriting": (
        "Carefully transcribe the handwritten text in this image. "
        "Do your best to interpret the handwriting accurately."
    ),
    "general": (
        "Extract and transcribe all text visible in this image. "
        "Maintain the reading order and structure."
    ),
}


def ocr_prompt(document_type: str, language: str | None = None) -> str:
    """Instruction sent with each image; unknown document types use the general prompt."""
    prompt = _OCR_PROMPTS.get(document_type.lower(), _OCR_PROMPTS["general"])
    if language:
        prompt += f" The text is in {language}."
    return prompt
