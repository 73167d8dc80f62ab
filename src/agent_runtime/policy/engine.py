"""
Tool Policy Engine - ordered rule check for a single tool call.

Rules are evaluated in order and the first match wins:
    1. Allowlist (tool must be in the agent's allowed_tools)
    2. Tenant isolation (call tenant must equal the agent's tenant)
    3. Approval gate (tool listed in approval_required with roles)
    4. Allow

Tenant isolation runs before the approval gate so a cross-tenant call is
always a hard deny and never merely escalated.
"""

import logging

from ..config.schema import AgentConfig
from ..models import PolicyDecision, ToolCall

logger = logging.getLogger(__name__)


class PolicyEngine:
    """
    Stateless allow/deny/require-approval decision for tool calls.

    Usage:
        engine = PolicyEngine()
        decision = engine.check(agent_config, tool_call)
    """

    def check(self, config: AgentConfig, tool_call: ToolCall) -> PolicyDecision:
        """
        Decide whether a tool call may proceed.

        Args:
            config: Configuration of the calling agent.
            tool_call: Proposed invocation.

        Returns:
            PolicyDecision with a populated reason in every branch.
        """
        # Rule 1: Allowlist
        if tool_call.tool not in config.allowed_tools:
            reason = (
                f'Agent "{config.name}" (role: {config.role}) is not permitted '
                f'to use tool "{tool_call.tool}". '
                f"Allowed tools: [{', '.join(config.allowed_tools)}]"
            )
            logger.warning(f"🔒 Denied '{tool_call.tool}' for agent '{config.id}': not allowlisted")
            return PolicyDecision(allowed=False, reason=reason)

        # Rule 2: Tenant isolation
        if config.tenant_id != tool_call.tenant_id:
            reason = (
                f'Tenant mismatch: agent belongs to "{config.tenant_id}" '
                f'but tool call targets "{tool_call.tenant_id}"'
            )
            logger.warning(
                f"🔒 Denied '{tool_call.tool}' for agent '{config.id}': "
                f"cross-tenant call to '{tool_call.tenant_id}'"
            )
            return PolicyDecision(allowed=False, reason=reason)

        # Rule 3: Approval gate
        approver_roles = list(config.approvers_for(tool_call.tool))
        if approver_roles:
            return PolicyDecision(
                allowed=True,
                reason=(
                    f'Tool "{tool_call.tool}" requires approval from: '
                    f"[{', '.join(approver_roles)}]"
                ),
                requires_approval=True,
                approver_roles=approver_roles,
            )

        # Rule 4: Allow
        logger.debug(f"🔒 Allowed '{tool_call.tool}' for agent '{config.id}'")
        return PolicyDecision(allowed=True, reason="Tool call permitted by policy")
