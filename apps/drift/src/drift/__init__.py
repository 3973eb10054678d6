"""drift: a floating arena body steered by impulses, thrust and a brake."""
