"""Fixer marketplace API"""
