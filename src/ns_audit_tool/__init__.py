"""Command line and HTTP front ends for the NS delegation auditor."""
