"""Capture-date extraction from media files and names, and XMP sidecar generation."""