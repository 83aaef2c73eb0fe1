"""
tfacc - Acceptance tests and sweepers for the Terraform aws_vpc resource.

This package drives the terraform CLI against a live AWS account, checks
the resulting VPCs through boto3, and sweeps leaked test VPCs from a region.
"""

__version__ = "0.1.0"
__author__ = "tfacc maintainers"
