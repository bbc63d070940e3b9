"""Test suite for pharmaflow"""
