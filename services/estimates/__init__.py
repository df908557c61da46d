"""Fleet-level annual cost and pricing estimate for the robot estate."""
