# -*- coding: utf-8 -*-

"""
Main entry point for the patient-education command line.
"""

import sys

from patient_education.cli import main

if __name__ == '__main__':
    sys.exit(main())
