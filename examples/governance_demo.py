"""
Governance system demonstration.

This script walks one deployment through the whole proposal lifecycle:
locking stake (directly and by permit), delegation, proposing, voting with
a closing-period extension, gas compensation, execution and a logic
upgrade, followed by an audit of the event log.
"""

import logging

logger = logging.getLogger(__name__)
import sys

from stakegov.governance import AuditTrail, RegistryProjection
from stakegov.logging import LogConfig, LogLevel, setup_logging
from stakegov.testing import (
    DeployDummyProposal,
    GovernanceFixture,
    StateChangeProposal,
    UpgradeProposal,
    tokens,
)


def print_section(title: str):
    """Print a section header."""
    logger.info(f"\n{'='*60}")
    logger.info(f"🎯 {title}")
    logger.info("=" * 60)


def demo_staking(env: GovernanceFixture):
    """Demonstrate locking tokens for voting power."""
    print_section("Staking")

    env.fund_and_lock("proposer", tokens(100_000))
    env.fund_and_lock("voter1", tokens(30_000))

    env.fund("voter2", tokens(45_000))
    deadline = env.chain.timestamp + 600
    signature = env.sign_permit("voter2", tokens(45_000), deadline)
    env.governance.lock_for(
        env.address("outsider"), env.address("voter2"), tokens(45_000), deadline, signature
    )

    for name in ("proposer", "voter1", "voter2"):
        balance = env.governance.locked_balance(env.address(name))
        logger.info(f"   {name}: {balance // tokens(1):,} SGOV locked")


def demo_delegation(env: GovernanceFixture):
    """Demonstrate delegating voting rights."""
    print_section("Delegation")

    env.governance.delegate(env.address("voter2"), env.address("delegate"))
    logger.info(f"   voter2 delegated to {env.governance.delegated_to(env.address('voter2'))}")


def demo_voting(env: GovernanceFixture) -> int:
    """Demonstrate a contested vote with a closing-period flip."""
    print_section("Proposal and Voting")

    env.chain.mint_native(env.governance.gas_vault, 10**18)
    env.governance.set_gas_compensation_cap(env.address("deployer"), 10**16)

    target = env.deploy(StateChangeProposal({"voting_delay": 600}))
    proposal_id = env.propose(target=target, description="Lengthen the voting delay")
    logger.info(f"   Proposal {proposal_id}: {env.governance.state_of(proposal_id).value}")

    env.move_to_active(proposal_id)
    env.governance.cast_vote(env.address("voter1"), proposal_id, True)
    logger.info(f"   voter1 voted for, gas refund {env.chain.balance_of(env.address('voter1'))} wei")

    proposal = env.governance.get_proposal(proposal_id)
    env.chain.set_timestamp(proposal.end_time - 60)
    env.governance.cast_delegated_vote(
        env.address("delegate"), [env.address("voter2")], proposal_id, False
    )
    extended = env.governance.get_proposal(proposal_id)
    logger.info(f"   Late flip extended voting to {extended.end_time} ({extended.extended})")

    env.chain.set_timestamp(extended.end_time - 60)
    env.governance.cast_vote(env.address("proposer"), proposal_id, True)
    env.move_to_execution(proposal_id)
    logger.info(f"   Proposal {proposal_id}: {env.governance.state_of(proposal_id).value}")
    return proposal_id


def demo_execution(env: GovernanceFixture, proposal_id: int):
    """Demonstrate executing a passed proposal."""
    print_section("Execution")

    result = env.governance.execute(env.address("outsider"), proposal_id)
    logger.info(f"   Executed proposal {proposal_id}: {result.output}")
    logger.info(f"   voting_delay is now {env.config.voting_delay}s")

    target = env.deploy(DeployDummyProposal())
    next_id = env.propose(target=target, description="Deploy a dummy")
    env.pass_proposal(next_id, ["proposer"])
    result = env.governance.execute(env.address("outsider"), next_id)
    logger.info(f"   Proposal {next_id} deployed a contract at {result.output}")


def demo_upgrade(env: GovernanceFixture):
    """Demonstrate replacing the governance logic."""
    print_section("Logic Upgrade")

    proposal_id = env.propose(target=env.deploy(UpgradeProposal()), description="Upgrade")
    env.pass_proposal(proposal_id, ["proposer"])
    env.governance.execute(env.address("outsider"), proposal_id)

    env.governance.call(env.address("voter1"), "set_greeting", "gm")
    logger.info(f"   Logic version {env.governance.version}, greeting {env.governance.view('greeting')!r}")


def demo_audit(env: GovernanceFixture):
    """Demonstrate the audit trail and event replay."""
    print_section("Audit")

    trail = AuditTrail.from_log(env.chain.event_log, env.governance.address)
    summary = trail.get_audit_summary()
    logger.info(f"   {summary['total_events']} events, integrity {summary['integrity_verified']}")
    for name, count in sorted(summary["event_counts"].items()):
        logger.info(f"   {name}: {count}")

    projection = RegistryProjection.replay(env.events())
    logger.info(f"   Replayed {len(projection.proposals)} proposals from events")


def main():
    """Run the governance demonstration."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    setup_logging(LogConfig(handlers=["memory"], level=LogLevel.INFO))

    try:
        env = GovernanceFixture()
        demo_staking(env)
        demo_delegation(env)
        proposal_id = demo_voting(env)
        demo_execution(env, proposal_id)
        demo_upgrade(env)
        demo_audit(env)
    except Exception as e:
        logger.error(f"\n❌ Demonstration failed: {e}")
        return 1

    logger.info("\n🎉 Governance demonstration complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
