"""
cbt-scraper: CBT Practice Question Scraper & PDF Builder

Logs into a CBT practice-question site, follows the chain of question
pages, and collects each question with its choices, images, explanation
and basic facts into a single PDF for offline study.
"""

__version__ = "1.0"
__author__ = "cbt-scraper Project"
__description__ = "CBT Practice Question Scraper & PDF Builder"
