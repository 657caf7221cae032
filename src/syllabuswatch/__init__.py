"""
SyllabusWatch - Course-outline deadline extractor and change tracker.

Turns scraped course-outline text into a clean, categorized list of
deadlines and reports what changed since the last scrape of a course.
"""

__version__ = "0.1.0"
__app_name__ = "syllabuswatch"
