"""
chainbench drives rate-limited smart-contract workloads against an EVM network
and reports throughput, success rate and gas cost per scenario and run.
"""
