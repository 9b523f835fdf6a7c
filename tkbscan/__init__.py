"""
tkbscan – turns OCR / PDF text of Vietnamese timetables into calendar event candidates.
"""
