"""
Problem Solver Application

A FastAPI-based service for solving math and science problems:
- Question submission with optional image upload
- Image resizing and cropping
- AI-generated solutions with LaTeX math formatting
"""

__version__ = "1.0.0"
