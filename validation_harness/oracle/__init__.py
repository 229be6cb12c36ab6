from .log_oracle import LogOracle as LogOracle
