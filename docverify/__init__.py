"""Identity document verification for the Cheapship marketplace.

A rule-based pipeline combining Pillow/OpenCV image preparation,
Tesseract OCR and regex pattern voting to classify identity documents,
extract holder fields, and decide between automatic approval and
manual review.
"""
