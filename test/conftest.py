import os
import sys

# Adjust path to find the package when it is not installed
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
