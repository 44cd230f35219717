"""Views: document model, render controller and page views."""
