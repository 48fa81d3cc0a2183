"""Document Artifact Ingestion System.

An OCR and language-model pipeline that extracts people, locations and
topical entities from scanned documents and reconciles them into a
normalized relational schema with bounding boxes for each person.
"""
